"""Shoe analysis pipeline: probabilities -> EV -> stake recommendations."""

from dataclasses import dataclass

from core.cards import BetType
from core.shoe import ShoeState
from core.statistics.ev import DEFAULT_COMMISSION_RATE, BetEV, EVCalculator, PayoutTable, TieBonusEV
from core.statistics.kelly import BetRecommendation, KellyAllocator
from core.statistics.probability import ExactProbabilityEngine, OutcomeProbabilities


@dataclass(frozen=True)
class ShoeAnalysis:
    """Everything derived from one shoe snapshot and one set of settings."""

    total_cards: int
    probabilities: OutcomeProbabilities
    evs: dict[BetType, BetEV]
    tie_bonuses: list[TieBonusEV]
    recommendations: list[BetRecommendation]


def analyze_shoe(
    shoe: ShoeState,
    payouts: PayoutTable | None = None,
    commission_rate: float = DEFAULT_COMMISSION_RATE,
    capital: int = 0,
    allocator: KellyAllocator | None = None,
) -> ShoeAnalysis:
    """
    Run the full analysis for a shoe.

    Recomputed from scratch on every call; nothing is cached between calls.

    Args:
        shoe: Remaining shoe composition
        payouts: Payout table (standard odds if omitted)
        commission_rate: Commission rebate in percent
        capital: Capital the stakes are scaled to
        allocator: Kelly allocator (quarter Kelly if omitted)

    Returns:
        ShoeAnalysis for the next coup
    """
    probabilities = ExactProbabilityEngine().calculate(shoe)
    calculator = EVCalculator(payouts)
    evs = calculator.calculate(probabilities, commission_rate)
    allocator = allocator or KellyAllocator()

    return ShoeAnalysis(
        total_cards=shoe.total,
        probabilities=probabilities,
        evs=evs,
        tie_bonuses=calculator.tie_bonuses(probabilities, commission_rate),
        recommendations=allocator.allocate(evs.values(), capital),
    )
