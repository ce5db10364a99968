"""Core baccarat shoe analysis - 100% UI-agnostic."""

from core.cards import BetType, Rank, Side
from core.shoe import ShoeState
from core.analysis import ShoeAnalysis, analyze_shoe

__all__ = [
    "BetType",
    "Rank",
    "Side",
    "ShoeState",
    "ShoeAnalysis",
    "analyze_shoe",
]
