"""Shoe tracker: the mutable shell around the immutable ShoeState."""

import logging
from dataclasses import dataclass
from typing import Any

from core.cards import Rank, Side
from core.rules import HandState, next_draw
from core.shoe import DEFAULT_NUM_DECKS, ShoeState
from core.tracker.events import EventEmitter, EventType, Listener

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """A recorded card and the side it was dealt to, or a hand separator."""

    rank: Rank | None = None
    side: Side | None = None

    @property
    def is_separator(self) -> bool:
        """Check if this entry marks the end of a hand."""
        return self.rank is None

    def __str__(self) -> str:
        if self.is_separator:
            return "|"
        return f"{self.side}:{self.rank}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for session storage."""
        if self.is_separator:
            return {"separator": True}
        return {"rank": self.rank.value, "side": self.side.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """Deserialize from session storage."""
        if data.get("separator"):
            return cls()
        return cls(rank=Rank(data["rank"]), side=Side(data["side"]))


class ShoeTracker:
    """
    Track the cards dealt from a live shoe.

    The tracker owns the only mutable copy of the shoe. Every mutation
    replaces the ShoeState snapshot and bumps ``version`` so that results
    computed for an older snapshot can be recognised as stale.

    Recorded cards are assigned to player or banker following the deal
    order and drawing rules of the coup in progress. Once the rules say a
    coup is complete the next card opens a new one.
    """

    def __init__(self, num_decks: int = DEFAULT_NUM_DECKS) -> None:
        """
        Initialize a tracker with a full shoe.

        Args:
            num_decks: Number of decks in the shoe
        """
        self._num_decks = num_decks
        self._shoe = ShoeState.full(num_decks)
        self._history: list[HistoryEntry] = []
        self._hand = HandState()
        self._version = 0
        self.events = EventEmitter()

    def subscribe(
        self,
        listener: Listener,
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to tracker events."""
        self.events.subscribe(listener, event_type)

    def record(self, rank: Rank) -> HistoryEntry:
        """
        Record a card dealt from the shoe.

        Args:
            rank: Rank of the dealt card

        Returns:
            The history entry, labelled with the receiving side

        Raises:
            ValueError: If no card of that rank is left in the shoe
        """
        if self._shoe.count(rank) == 0:
            raise ValueError(f"No {rank} left in the shoe")

        side = next_draw(self._hand)
        if side is None:
            self._hand = HandState()
            side = next_draw(self._hand)
        self._hand = self._hand.draw(side, rank.baccarat_value)

        entry = HistoryEntry(rank=rank, side=side)
        self._history.append(entry)
        self._shoe = self._shoe.deal(rank)
        self._version += 1

        self.events.emit(
            EventType.CARD_RECORDED,
            self._version,
            rank=str(rank),
            side=str(side),
            cards_remaining=self._shoe.total,
        )
        return entry

    def separator(self) -> HistoryEntry | None:
        """
        Close the coup in progress.

        Returns:
            The separator entry, or None if the history is empty or already
            ends with a separator
        """
        if not self._history or self._history[-1].is_separator:
            return None

        entry = HistoryEntry()
        self._history.append(entry)
        self._hand = HandState()
        self._version += 1

        self.events.emit(EventType.SEPARATOR_ADDED, self._version)
        return entry

    def undo(self) -> HistoryEntry | None:
        """
        Remove the last history entry, returning its card to the shoe.

        Returns:
            The removed entry, or None if there is nothing to undo
        """
        if not self._history:
            return None

        entry = self._history.pop()
        self._hand = self._replay()
        self._version += 1

        if entry.is_separator:
            self.events.emit(EventType.SEPARATOR_REMOVED, self._version)
        else:
            self._shoe = self._shoe.restore(entry.rank)
            self.events.emit(
                EventType.CARD_UNDONE,
                self._version,
                rank=str(entry.rank),
                side=str(entry.side),
                cards_remaining=self._shoe.total,
            )
        return entry

    def clear(self) -> None:
        """Reset to a full shoe with no history."""
        self._shoe = ShoeState.full(self._num_decks)
        self._history.clear()
        self._hand = HandState()
        self._version += 1

        logger.debug("Shoe cleared (%d decks)", self._num_decks)
        self.events.emit(EventType.SHOE_CLEARED, self._version, cards_remaining=self._shoe.total)

    def _replay(self) -> HandState:
        """Rebuild the coup in progress from the history."""
        hand = HandState()
        for entry in self._history:
            if entry.is_separator:
                hand = HandState()
                continue
            if hand.is_complete:
                hand = HandState()
            hand = hand.draw(entry.side, entry.rank.baccarat_value)
        return hand

    @property
    def shoe(self) -> ShoeState:
        """Return the current shoe snapshot."""
        return self._shoe

    @property
    def history(self) -> list[HistoryEntry]:
        """Return the card history, oldest first."""
        return self._history.copy()

    @property
    def version(self) -> int:
        """Return the mutation counter."""
        return self._version

    @property
    def num_decks(self) -> int:
        """Return the number of decks in the shoe."""
        return self._num_decks

    @property
    def current_hand(self) -> HandState:
        """Return the coup in progress (complete if no more cards are due)."""
        return self._hand

    @property
    def next_side(self) -> Side:
        """Return the side that receives the next recorded card."""
        return next_draw(self._hand) or Side.PLAYER

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards recorded."""
        return sum(1 for entry in self._history if not entry.is_separator)

    def to_dict(self) -> dict[str, Any]:
        """Serialize tracker state for session storage."""
        return {
            "num_decks": self._num_decks,
            "counts": list(self._shoe.counts),
            "history": [entry.to_dict() for entry in self._history],
            "version": self._version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShoeTracker":
        """Restore a tracker from session storage."""
        tracker = cls(num_decks=data["num_decks"])
        tracker._shoe = ShoeState(
            counts=tuple(data["counts"]),
            deck_count=tracker._shoe.deck_count,
        )
        tracker._history = [HistoryEntry.from_dict(e) for e in data["history"]]
        tracker._hand = tracker._replay()
        tracker._version = data.get("version", 0)
        return tracker
