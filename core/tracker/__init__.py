"""Stateful shoe tracking: card entry, undo, separators and events."""

from core.tracker.events import EventType, TrackerEvent
from core.tracker.tracker import HistoryEntry, ShoeTracker

__all__ = [
    "EventType",
    "TrackerEvent",
    "HistoryEntry",
    "ShoeTracker",
]
