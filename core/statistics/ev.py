"""Expected value per bet from exact outcome probabilities."""

from dataclasses import dataclass, field

from core.cards import BetType
from core.statistics.probability import OutcomeProbabilities

# Super 6 pays a fixed 12 to 1; PayoutTable rejects any other value
SUPER6_PAYOUT = 12.0
DEFAULT_COMMISSION_RATE = 2.0


@dataclass(frozen=True)
class PayoutTable:
    """
    Net odds paid per unit staked on a winning bet.

    ``tie_bonus`` optionally maps a tied total (0-9) to the net odds of a
    tie-on-that-total side bet.
    """

    banker: float = 0.95
    player: float = 1.0
    tie: float = 8.0
    player_pair: float = 11.0
    banker_pair: float = 11.0
    super6: float = SUPER6_PAYOUT
    tie_bonus: dict[int, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate payouts."""
        for bet in BetType:
            if self.for_bet(bet) <= 0:
                raise ValueError(f"{bet} payout must be positive")
        if self.super6 != SUPER6_PAYOUT:
            raise ValueError(f"Super 6 pays a fixed {SUPER6_PAYOUT:g} to 1, got {self.super6:g}")
        for point, payout in self.tie_bonus.items():
            if not 0 <= point <= 9:
                raise ValueError(f"Tie bonus point must be between 0 and 9, got {point}")
            if payout <= 0:
                raise ValueError(f"Tie bonus payout for {point} must be positive")

    def for_bet(self, bet: BetType) -> float:
        """Return the net odds for a bet."""
        return {
            BetType.BANKER: self.banker,
            BetType.PLAYER: self.player,
            BetType.TIE: self.tie,
            BetType.BANKER_PAIR: self.banker_pair,
            BetType.PLAYER_PAIR: self.player_pair,
            BetType.SUPER6: self.super6,
        }[bet]


@dataclass(frozen=True)
class BetEV:
    """Win probability, payout and expected return of one bet."""

    bet: BetType
    probability: float
    payout: float
    ev: float


@dataclass(frozen=True)
class TieBonusEV:
    """Expected return of a tie-on-a-given-total side bet."""

    point: int
    probability: float
    payout: float
    ev: float


class EVCalculator:
    """
    Turn outcome probabilities into expected value per unit staked.

    The commission rebate enters every bet as the same additive term,
    half the commission rate, rather than as per-bet vigorish.
    """

    def __init__(self, payouts: PayoutTable | None = None) -> None:
        """
        Initialize the calculator.

        Args:
            payouts: Payout table. Defaults to standard net odds.
        """
        self.payouts = payouts or PayoutTable()

    @staticmethod
    def rebate(commission_rate: float) -> float:
        """Return the additive EV term for a commission rate given in percent."""
        return commission_rate / 100 / 2

    def calculate(
        self,
        probabilities: OutcomeProbabilities,
        commission_rate: float = DEFAULT_COMMISSION_RATE,
    ) -> dict[BetType, BetEV]:
        """
        Calculate EV for every bet on the layout.

        Args:
            probabilities: Outcome probabilities for the next coup
            commission_rate: Commission rebate in percent (2.0 = 2%)

        Returns:
            BetEV per bet, in BetType order
        """
        p = probabilities
        payouts = self.payouts
        rebate = self.rebate(commission_rate)

        evs = {
            BetType.BANKER: p.banker_win * payouts.banker - p.player_win + rebate,
            BetType.PLAYER: p.player_win * payouts.player - p.banker_win + rebate,
            BetType.TIE: p.tie * payouts.tie - (1 - p.tie) + rebate,
            BetType.BANKER_PAIR: p.banker_pair * (payouts.banker_pair + 1) - 1 + rebate,
            BetType.PLAYER_PAIR: p.player_pair * (payouts.player_pair + 1) - 1 + rebate,
            BetType.SUPER6: p.super6 * SUPER6_PAYOUT - (1 - p.super6) + rebate,
        }
        win_probabilities = {
            BetType.BANKER: p.banker_win,
            BetType.PLAYER: p.player_win,
            BetType.TIE: p.tie,
            BetType.BANKER_PAIR: p.banker_pair,
            BetType.PLAYER_PAIR: p.player_pair,
            BetType.SUPER6: p.super6,
        }

        return {
            bet: BetEV(
                bet=bet,
                probability=win_probabilities[bet],
                payout=payouts.for_bet(bet),
                ev=evs[bet],
            )
            for bet in BetType
        }

    def tie_bonuses(
        self,
        probabilities: OutcomeProbabilities,
        commission_rate: float = DEFAULT_COMMISSION_RATE,
    ) -> list[TieBonusEV]:
        """Calculate EV for each configured tie-on-a-total side bet."""
        rebate = self.rebate(commission_rate)
        results = []
        for point, payout in sorted(self.payouts.tie_bonus.items()):
            probability = probabilities.tie_at(point)
            results.append(
                TieBonusEV(
                    point=point,
                    probability=probability,
                    payout=payout,
                    ev=probability * (payout + 1) - 1 + rebate,
                )
            )
        return results
