"""Shoe tracking API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Header

from api.schemas import (
    HistoryEntryResponse,
    NewShoeRequest,
    RecordCardRequest,
    ShoeStateResponse,
    UndoResponse,
)
from api.session import create_session, extract_session_id, load_tracker, save_tracker
from config import config
from core.cards import Rank
from core.tracker import HistoryEntry, ShoeTracker

logger = logging.getLogger(__name__)

router = APIRouter()

# Live trackers by session token, backed by the session store
_trackers: dict[str, ShoeTracker] = {}


async def get_tracker(session_id: str) -> ShoeTracker:
    """
    Get the tracker for a session.

    Raises:
        HTTPException: 404 if the token is invalid or the session has no shoe
    """
    if session_id in _trackers:
        return _trackers[session_id]

    if extract_session_id(session_id) is not None:
        tracker = await load_tracker(session_id)
        if tracker is not None:
            _trackers[session_id] = tracker
            return tracker

    raise HTTPException(status_code=404, detail="Unknown session")


def entry_to_response(entry: HistoryEntry) -> HistoryEntryResponse:
    """Convert a HistoryEntry to HistoryEntryResponse."""
    return HistoryEntryResponse(
        rank=None if entry.is_separator else str(entry.rank),
        side=None if entry.is_separator else str(entry.side),
        separator=entry.is_separator,
    )


def tracker_to_response(tracker: ShoeTracker) -> ShoeStateResponse:
    """Convert tracker state to response."""
    return ShoeStateResponse(
        num_decks=tracker.num_decks,
        counts=tracker.shoe.to_dict(),
        total_cards=tracker.shoe.total,
        cards_dealt=tracker.cards_dealt,
        next_side=str(tracker.next_side),
        history=[entry_to_response(e) for e in tracker.history],
        version=tracker.version,
    )


@router.post("/new")
async def new_shoe(
    request: NewShoeRequest | None = None,
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """Create a session tracking a full shoe."""
    if session_id is None or extract_session_id(session_id) is None:
        session_id = await create_session()

    num_decks = config.advisor.num_decks
    if request is not None and request.num_decks is not None:
        num_decks = request.num_decks

    tracker = ShoeTracker(num_decks=num_decks)
    _trackers[session_id] = tracker
    await save_tracker(session_id, tracker)

    logger.info("New %d-deck shoe for session %s", num_decks, session_id[:8])
    return {"session_id": session_id}


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> ShoeStateResponse:
    """Get the current shoe state."""
    tracker = await get_tracker(session_id)
    return tracker_to_response(tracker)


@router.post("/card")
async def record_card(
    request: RecordCardRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> ShoeStateResponse:
    """Record a card dealt from the shoe."""
    tracker = await get_tracker(session_id)

    try:
        tracker.record(Rank.parse(request.rank))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await save_tracker(session_id, tracker)
    return tracker_to_response(tracker)


@router.post("/undo")
async def undo(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> UndoResponse:
    """Undo the last history entry."""
    tracker = await get_tracker(session_id)
    entry = tracker.undo()
    if entry is not None:
        await save_tracker(session_id, tracker)

    return UndoResponse(
        undone=entry_to_response(entry) if entry is not None else None,
        state=tracker_to_response(tracker),
    )


@router.post("/separator")
async def separator(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> ShoeStateResponse:
    """Close the coup in progress."""
    tracker = await get_tracker(session_id)
    if tracker.separator() is not None:
        await save_tracker(session_id, tracker)
    return tracker_to_response(tracker)


@router.post("/clear")
async def clear(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> ShoeStateResponse:
    """Reset to a full shoe."""
    tracker = await get_tracker(session_id)
    tracker.clear()
    await save_tracker(session_id, tracker)
    return tracker_to_response(tracker)
