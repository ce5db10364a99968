"""Notifications emitted by the shoe tracker."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable


class EventType(Enum):
    """What changed in the tracked shoe."""

    CARD_RECORDED = "card_recorded"
    CARD_UNDONE = "card_undone"
    SEPARATOR_ADDED = "separator_added"
    SEPARATOR_REMOVED = "separator_removed"
    SHOE_CLEARED = "shoe_cleared"


@dataclass(frozen=True)
class TrackerEvent:
    """One change to the tracked shoe, stamped with the version it produced."""

    event_type: EventType
    version: int
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"v{self.version} {self.event_type.value}: {self.data}"


Listener = Callable[[TrackerEvent], None]


class EventEmitter:
    """
    Dispatch tracker events to listeners.

    Listeners registered for one event type run before listeners registered
    for every event; each group runs in subscription order.
    """

    def __init__(self) -> None:
        self._listeners: defaultdict[EventType | None, list[Listener]] = defaultdict(list)

    def subscribe(self, listener: Listener, event_type: EventType | None = None) -> None:
        """Register a listener for one event type, or for all with None."""
        self._listeners[event_type].append(listener)

    def unsubscribe(self, listener: Listener, event_type: EventType | None = None) -> None:
        listeners = self._listeners[event_type]
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event_type: EventType, version: int, **data: Any) -> TrackerEvent:
        """Build an event and hand it to every matching listener."""
        event = TrackerEvent(event_type, version, data)
        for listener in (*self._listeners[event_type], *self._listeners[None]):
            listener(event)
        return event
