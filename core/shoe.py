"""Remaining-shoe composition as an immutable per-rank count snapshot."""

from dataclasses import dataclass
from typing import Iterator, Mapping

from core.cards import Rank

CARDS_PER_RANK_PER_DECK = 4
DEFAULT_NUM_DECKS = 8


@dataclass(frozen=True, slots=True)
class ShoeState:
    """
    Immutable snapshot of the undealt cards.

    ``counts`` holds one entry per rank in ``Rank`` order (Ace..King).
    ``deck_count`` is the number of copies of each rank in a full shoe,
    32 for an 8-deck shoe.
    """

    counts: tuple[int, ...]
    deck_count: int = CARDS_PER_RANK_PER_DECK * DEFAULT_NUM_DECKS

    def __post_init__(self) -> None:
        """Validate counts against the shoe size."""
        if self.deck_count < 1:
            raise ValueError("deck_count must be at least 1")
        if len(self.counts) != len(Rank):
            raise ValueError(f"Expected {len(Rank)} rank counts, got {len(self.counts)}")
        for rank, count in zip(Rank, self.counts):
            if not 0 <= count <= self.deck_count:
                raise ValueError(
                    f"Count for {rank} must be between 0 and {self.deck_count}, got {count}"
                )

    @classmethod
    def full(cls, num_decks: int = DEFAULT_NUM_DECKS) -> "ShoeState":
        """Create a fresh shoe with every rank at full strength."""
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")
        deck_count = CARDS_PER_RANK_PER_DECK * num_decks
        return cls(counts=(deck_count,) * len(Rank), deck_count=deck_count)

    @classmethod
    def from_mapping(
        cls,
        counts: Mapping[Rank, int],
        deck_count: int = CARDS_PER_RANK_PER_DECK * DEFAULT_NUM_DECKS,
    ) -> "ShoeState":
        """Create a shoe from a rank -> count mapping. Missing ranks count as 0."""
        return cls(
            counts=tuple(counts.get(rank, 0) for rank in Rank),
            deck_count=deck_count,
        )

    def count(self, rank: Rank) -> int:
        """Return the number of cards of a rank still in the shoe."""
        return self.counts[rank.value - 1]

    def deal(self, rank: Rank) -> "ShoeState":
        """Return the shoe with one card of ``rank`` removed (never below 0)."""
        return self._with_count(rank, max(0, self.count(rank) - 1))

    def restore(self, rank: Rank) -> "ShoeState":
        """Return the shoe with one card of ``rank`` put back (never above deck_count)."""
        return self._with_count(rank, min(self.deck_count, self.count(rank) + 1))

    def _with_count(self, rank: Rank, count: int) -> "ShoeState":
        counts = list(self.counts)
        counts[rank.value - 1] = count
        return ShoeState(counts=tuple(counts), deck_count=self.deck_count)

    def value_counts(self) -> list[int]:
        """Collapse rank counts into the ten baccarat-value buckets (0-9)."""
        buckets = [0] * 10
        for rank, count in zip(Rank, self.counts):
            buckets[rank.baccarat_value] += count
        return buckets

    def items(self) -> Iterator[tuple[Rank, int]]:
        """Iterate over (rank, count) pairs."""
        return zip(Rank, self.counts)

    def to_dict(self) -> dict[str, int]:
        """Return counts keyed by rank label."""
        return {str(rank): count for rank, count in self.items()}

    @property
    def total(self) -> int:
        """Return the total number of cards remaining."""
        return sum(self.counts)

    @property
    def num_decks(self) -> int:
        """Return the number of decks the shoe was built from."""
        return self.deck_count // CARDS_PER_RANK_PER_DECK

    @property
    def is_full(self) -> bool:
        """Check if no card has been dealt."""
        return all(count == self.deck_count for count in self.counts)

    def __len__(self) -> int:
        return self.total
