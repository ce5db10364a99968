"""Kelly criterion stake sizing for baccarat bets."""

import math
from dataclasses import dataclass
from typing import Iterable

from core.cards import BetType
from core.statistics.ev import BetEV

DEFAULT_KELLY_FRACTION = 0.25
DEFAULT_MIN_WIN_PROBABILITY = 0.01


@dataclass(frozen=True)
class BetRecommendation:
    """Stake recommendation for one bet."""

    bet: BetType
    probability: float
    ev: float
    kelly: float
    stake: int
    should_bet: bool


def kelly_criterion(ev: float, net_odds: float) -> float:
    """
    Calculate the full Kelly fraction from a bet's expected value.

    Formula: f* = (bp - q) / b = EV / b
    where:
        f* = fraction of bankroll to bet
        b = net odds received on the bet
        p = probability of winning
        q = probability of losing (1 - p)

    For a bet that either wins or loses, bp - q is its EV per unit staked.
    Banker and player push on a tie and every bet carries the commission
    rebate, so the EV from EVCalculator is used in place of bp - q. The
    fraction is then positive exactly when the EV is.

    Args:
        ev: Expected return per unit staked
        net_odds: Amount won per unit staked

    Returns:
        Kelly fraction. Zero or negative means the bet has no edge.
    """
    assert net_odds > 0, "net odds must be positive"
    return ev / net_odds


class KellyAllocator:
    """
    Size stakes with fractional Kelly and rank them.

    A bet is recommended only if its EV is positive and its win
    probability is above ``min_win_probability``. Stakes are whole units of
    ``floor(kelly * kelly_fraction * capital)``, capped at the capital.
    """

    def __init__(
        self,
        kelly_fraction: float = DEFAULT_KELLY_FRACTION,
        min_win_probability: float = DEFAULT_MIN_WIN_PROBABILITY,
    ) -> None:
        """
        Initialize the allocator.

        Args:
            kelly_fraction: Fraction of Kelly to use (0.25 = quarter Kelly)
            min_win_probability: Bets at or below this win probability are skipped
        """
        if not 0.0 < kelly_fraction <= 1.0:
            raise ValueError("kelly_fraction must be between 0 and 1")
        if not 0.0 <= min_win_probability < 1.0:
            raise ValueError("min_win_probability must be between 0 and 1")
        self.kelly_fraction = kelly_fraction
        self.min_win_probability = min_win_probability

    def recommend(self, bet_ev: BetEV, capital: int) -> BetRecommendation:
        """Size a single bet."""
        kelly = kelly_criterion(bet_ev.ev, bet_ev.payout)
        should_bet = kelly > 0 and bet_ev.probability > self.min_win_probability
        stake = 0
        if should_bet:
            # The rebate can push full Kelly past 1
            stake = min(capital, math.floor(kelly * self.kelly_fraction * capital))

        return BetRecommendation(
            bet=bet_ev.bet,
            probability=bet_ev.probability,
            ev=bet_ev.ev,
            kelly=kelly,
            stake=stake,
            should_bet=should_bet,
        )

    def allocate(self, evs: Iterable[BetEV], capital: int) -> list[BetRecommendation]:
        """
        Recommend stakes for every bet, largest stake first.

        Args:
            evs: EV results, one per bet
            capital: Total capital available

        Returns:
            Recommendations sorted by stake, ties kept in bet enumeration order
        """
        if capital < 0:
            raise ValueError("capital must not be negative")

        order = list(BetType)
        recommendations = sorted(
            (self.recommend(bet_ev, capital) for bet_ev in evs),
            key=lambda r: order.index(r.bet),
        )
        # sorted() is stable, so equal stakes keep enumeration order
        return sorted(recommendations, key=lambda r: r.stake, reverse=True)
