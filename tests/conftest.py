"""Pytest fixtures for baccarat advisor tests."""

import pytest

from core.cards import Rank
from core.shoe import ShoeState
from core.statistics import (
    EVCalculator,
    ExactProbabilityEngine,
    KellyAllocator,
    OutcomeProbabilities,
)
from core.tracker import ShoeTracker


@pytest.fixture
def full_shoe():
    """A fresh 8-deck shoe (32 of each rank, 416 cards)."""
    return ShoeState.full(8)


@pytest.fixture(scope="session")
def full_shoe_probabilities():
    """Outcome probabilities of a fresh 8-deck shoe, computed once."""
    return ExactProbabilityEngine().calculate(ShoeState.full(8))


@pytest.fixture
def engine():
    """Exact probability engine."""
    return ExactProbabilityEngine()


@pytest.fixture
def calculator():
    """EV calculator with standard payouts."""
    return EVCalculator()


@pytest.fixture
def allocator():
    """Quarter-Kelly allocator."""
    return KellyAllocator()


@pytest.fixture
def tracker():
    """A tracker on a fresh 8-deck shoe."""
    return ShoeTracker(num_decks=8)


@pytest.fixture
def nines_only_shoe():
    """Ten nines and nothing else: every coup is a natural 8-8 tie."""
    return ShoeState.from_mapping({Rank.NINE: 10})


@pytest.fixture
def tens_and_nines_shoe():
    """A shoe holding only zero-value and nine-value cards."""
    return ShoeState.from_mapping({Rank.TEN: 6, Rank.KING: 4, Rank.NINE: 5})


@pytest.fixture
def sample_probabilities():
    """Hand-picked outcome probabilities for formula checks."""
    return OutcomeProbabilities(
        player_win=0.45,
        banker_win=0.46,
        tie=0.09,
        player_pair=0.075,
        banker_pair=0.075,
        super6_two_card=0.02,
        super6_three_card=0.03,
        tie_by_point=(0.01, 0.005, 0.005, 0.005, 0.005, 0.005, 0.015, 0.02, 0.01, 0.01),
    )


@pytest.fixture
def memory_store(monkeypatch):
    """Route API sessions to a fresh in-memory store."""
    import api.session as session_module
    from api.session import InMemorySessionStore

    store = InMemorySessionStore()
    monkeypatch.setattr(session_module, "_session_store", store)
    return store
