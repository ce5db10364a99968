"""Exact outcome probabilities for a baccarat coup dealt from a known shoe."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from core.cards import Side
from core.rules import DEAL_ORDER, banker_draws, hand_total, is_natural, player_draws, winner
from core.shoe import ShoeState

logger = logging.getLogger(__name__)

SUPER6_TOTAL = 6


@dataclass(frozen=True)
class OutcomeProbabilities:
    """
    Probability of each bet's winning outcome for the next coup.

    ``tie_by_point`` splits the tie mass by the tied total (index 0-9).
    ``super6`` is the banker winning on exactly 6, split into two-card and
    three-card wins.
    """

    player_win: float = 0.0
    banker_win: float = 0.0
    tie: float = 0.0
    player_pair: float = 0.0
    banker_pair: float = 0.0
    super6_two_card: float = 0.0
    super6_three_card: float = 0.0
    tie_by_point: tuple[float, ...] = field(default=(0.0,) * 10)

    @property
    def super6(self) -> float:
        """Probability that the banker wins with a total of 6."""
        return self.super6_two_card + self.super6_three_card

    @property
    def total(self) -> float:
        """Sum of the mutually exclusive main outcomes."""
        return self.player_win + self.banker_win + self.tie

    def tie_at(self, point: int) -> float:
        """Probability of a tie on a given total."""
        return self.tie_by_point[point]


class _OutcomeTally:
    """Mutable accumulator used during a single enumeration."""

    def __init__(self) -> None:
        self.player_win = 0.0
        self.banker_win = 0.0
        self.tie = 0.0
        self.tie_by_point = [0.0] * 10
        self.super6_two_card = 0.0
        self.super6_three_card = 0.0
        self.branches = 0

    def settle(
        self,
        player_total: int,
        banker_total: int,
        banker_cards: int,
        probability: float,
    ) -> None:
        """Credit a finished coup to exactly one main outcome."""
        self.branches += 1
        result = winner(player_total, banker_total)
        if result is Side.PLAYER:
            self.player_win += probability
        elif result is Side.BANKER:
            self.banker_win += probability
            if banker_total == SUPER6_TOTAL:
                if banker_cards == 2:
                    self.super6_two_card += probability
                else:
                    self.super6_three_card += probability
        else:
            self.tie += probability
            self.tie_by_point[player_total] += probability


def pair_probability(shoe: ShoeState) -> float:
    """
    Probability that the first two cards to one side share a rank.

    P(pair) = sum over ranks of (c/T) * ((c-1)/(T-1)). This does not reserve
    the cards already dealt to the other side.
    """
    total = shoe.total
    if total < 2:
        return 0.0

    probability = 0.0
    for _, count in shoe.items():
        if count >= 2:
            probability += (count / total) * ((count - 1) / (total - 1))
    return probability


# (player total, banker total, value counts left) after the four opening cards
_OpeningState = tuple[int, int, tuple[int, ...]]


class ExactProbabilityEngine:
    """
    Enumerate every card sequence of the next coup without replacement.

    The four opening cards are dealt player, banker, player, banker. Every
    opening is weighted by the product of its conditional draw
    probabilities and grouped by the two totals and the value counts left
    in the shoe, since nothing else decides the rest of the coup. The third
    card stage then runs once per distinct opening state: a natural ends
    the coup, otherwise the player rule and the banker tableau decide who
    draws. Values with no cards left are skipped.

    The grouping lives for one call only; nothing is cached between calls.
    """

    # Fewer cards than this cannot be guaranteed to complete a coup
    MIN_CARDS = 6

    def calculate(self, shoe: ShoeState) -> OutcomeProbabilities:
        """
        Compute outcome probabilities for the next coup.

        Args:
            shoe: Remaining shoe composition

        Returns:
            OutcomeProbabilities, all zero when fewer than MIN_CARDS remain
        """
        total = shoe.total
        if total < self.MIN_CARDS:
            return OutcomeProbabilities()

        counts = shoe.value_counts()
        assert all(count >= 0 for count in counts), "shoe counts must be non-negative"

        openings: defaultdict[_OpeningState, float] = defaultdict(float)
        self._open(counts, total, 1.0, (), openings)

        tally = _OutcomeTally()
        for (player_total, banker_total, left), probability in openings.items():
            self._finish(left, total - 4, player_total, banker_total, probability, tally)

        pair = pair_probability(shoe)
        logger.debug(
            "Enumerated %d terminal branches from %d opening states for %d cards",
            tally.branches,
            len(openings),
            total,
        )

        return OutcomeProbabilities(
            player_win=tally.player_win,
            banker_win=tally.banker_win,
            tie=tally.tie,
            player_pair=pair,
            banker_pair=pair,
            super6_two_card=tally.super6_two_card,
            super6_three_card=tally.super6_three_card,
            tie_by_point=tuple(tally.tie_by_point),
        )

    def _open(
        self,
        counts: list[int],
        remaining: int,
        probability: float,
        cards: tuple[int, ...],
        openings: defaultdict[_OpeningState, float],
    ) -> None:
        """Deal the opening cards and add each result to its state."""
        if len(cards) == len(DEAL_ORDER):
            player_total = hand_total(cards[0::2])
            banker_total = hand_total(cards[1::2])
            openings[(player_total, banker_total, tuple(counts))] += probability
            return

        for value in range(10):
            count = counts[value]
            if count == 0:
                continue
            counts[value] = count - 1
            self._open(
                counts,
                remaining - 1,
                probability * (count / remaining),
                cards + (value,),
                openings,
            )
            counts[value] = count

    @staticmethod
    def _finish(
        counts: tuple[int, ...],
        remaining: int,
        player_total: int,
        banker_total: int,
        probability: float,
        tally: _OutcomeTally,
    ) -> None:
        """Play out the third cards of one opening state."""
        if is_natural(player_total) or is_natural(banker_total):
            tally.settle(player_total, banker_total, 2, probability)
            return

        if not player_draws(player_total):
            if not banker_draws(banker_total, None):
                tally.settle(player_total, banker_total, 2, probability)
                return
            for value, count in enumerate(counts):
                if count:
                    tally.settle(
                        player_total,
                        hand_total((banker_total, value)),
                        3,
                        probability * (count / remaining),
                    )
            return

        for third, count in enumerate(counts):
            if count == 0:
                continue
            drawn = probability * (count / remaining)
            player_final = hand_total((player_total, third))
            if not banker_draws(banker_total, third):
                tally.settle(player_final, banker_total, 2, drawn)
                continue
            for value, banker_count in enumerate(counts):
                if value == third:
                    banker_count -= 1
                if banker_count > 0:
                    tally.settle(
                        player_final,
                        hand_total((banker_total, value)),
                        3,
                        drawn * (banker_count / (remaining - 1)),
                    )
