"""Exact probability, expected value and stake sizing for baccarat bets."""

from core.statistics.probability import (
    ExactProbabilityEngine,
    OutcomeProbabilities,
    pair_probability,
)
from core.statistics.ev import BetEV, EVCalculator, PayoutTable, TieBonusEV
from core.statistics.kelly import BetRecommendation, KellyAllocator, kelly_criterion

__all__ = [
    "ExactProbabilityEngine",
    "OutcomeProbabilities",
    "pair_probability",
    "BetEV",
    "EVCalculator",
    "PayoutTable",
    "TieBonusEV",
    "BetRecommendation",
    "KellyAllocator",
    "kelly_criterion",
]
