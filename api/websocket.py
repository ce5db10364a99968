"""WebSocket connection management with live shoe analysis."""

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from api.routes.analysis import analysis_to_response, run_analysis
from api.routes.shoe import get_tracker, tracker_to_response
from api.schemas import AnalysisSettings
from api.session import save_tracker
from core.cards import Rank
from core.shoe import ShoeState
from core.tracker import ShoeTracker

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionManager:
    """Manage WebSocket connections."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket, session_id: str) -> None:
        """Accept and register a new connection."""
        await websocket.accept()
        self._connections[session_id] = websocket
        logger.info(
            "Session %s connected (%d active)", session_id[:8], self.active_connections
        )

    def disconnect(self, session_id: str) -> None:
        """Remove a connection."""
        if self._connections.pop(session_id, None) is not None:
            logger.info(
                "Session %s disconnected (%d active)", session_id[:8], self.active_connections
            )

    @property
    def active_connections(self) -> int:
        """Return number of active connections."""
        return len(self._connections)


# Global connection manager
manager = ConnectionManager()


class AnalysisStream:
    """
    Push analysis results for one connection.

    Each recomputation is keyed by the tracker version and the settings
    revision it was started for. Only a result whose key still matches the
    current one is sent; anything older is dropped.
    """

    def __init__(self, websocket: WebSocket, tracker: ShoeTracker) -> None:
        self._websocket = websocket
        self.tracker = tracker
        self.settings = AnalysisSettings()
        self._settings_revision = 0
        self._task: asyncio.Task | None = None

    @property
    def key(self) -> tuple[int, int]:
        """Return the (tracker version, settings revision) of the latest input."""
        return self.tracker.version, self._settings_revision

    def update_settings(self, settings: AnalysisSettings) -> None:
        """Replace the analysis settings."""
        self.settings = settings
        self._settings_revision += 1

    def refresh(self) -> None:
        """Start a recomputation for the latest input, abandoning any in flight."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.create_task(
            self._compute(self.key, self.tracker.shoe, self.settings)
        )

    async def _compute(
        self,
        key: tuple[int, int],
        shoe: ShoeState,
        settings: AnalysisSettings,
    ) -> None:
        """Compute one analysis and send it if its key is still current."""
        try:
            try:
                analysis = await asyncio.to_thread(run_analysis, shoe, settings)
            except ValueError as e:
                await self._websocket.send_json({"type": "error", "message": str(e)})
                return

            if key != self.key:
                logger.debug("Dropping stale analysis for version %s (now %s)", key, self.key)
                return

            response = analysis_to_response(analysis, version=key[0])
            await self._websocket.send_json(
                {"type": "analysis", "analysis": response.model_dump()}
            )
        except Exception:
            logger.exception("Analysis push failed for version %s", key)

    async def close(self) -> None:
        """Cancel any computation in flight."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass


def _state_message(tracker: ShoeTracker) -> dict[str, Any]:
    return {"type": "state", "state": tracker_to_response(tracker).model_dump()}


@router.websocket("/shoe/{session_id}")
async def shoe_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for live shoe tracking.

    Messages from client:
    - {"type": "card", "rank": "A"}
    - {"type": "undo"}
    - {"type": "separator"}
    - {"type": "clear"}
    - {"type": "settings", "commission_rate": 2.0, "capital": 100000, ...}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "state", "state": {...}}
    - {"type": "analysis", "analysis": {...}}
    - {"type": "error", "message": "..."}
    """
    await manager.connect(websocket, session_id)

    try:
        tracker = await get_tracker(session_id)
    except HTTPException as e:
        await websocket.send_json({"type": "error", "message": e.detail})
        await websocket.close(code=4404)
        manager.disconnect(session_id)
        return

    stream = AnalysisStream(websocket, tracker)
    await websocket.send_json(_state_message(tracker))
    stream.refresh()

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue

            msg_type = message.get("type")
            mutated = False

            if msg_type == "card":
                try:
                    tracker.record(Rank.parse(str(message.get("rank", ""))))
                except ValueError as e:
                    await websocket.send_json({"type": "error", "message": str(e)})
                    continue
                mutated = True

            elif msg_type == "undo":
                mutated = tracker.undo() is not None

            elif msg_type == "separator":
                mutated = tracker.separator() is not None

            elif msg_type == "clear":
                tracker.clear()
                mutated = True

            elif msg_type == "settings":
                fields = {k: v for k, v in message.items() if k != "type"}
                try:
                    stream.update_settings(AnalysisSettings.model_validate(fields))
                except ValidationError as e:
                    await websocket.send_json({"type": "error", "message": str(e)})
                    continue
                stream.refresh()
                continue

            elif msg_type != "get_state":
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {msg_type}",
                })
                continue

            if mutated:
                await save_tracker(session_id, tracker)
            await websocket.send_json(_state_message(tracker))
            if mutated:
                stream.refresh()

    except WebSocketDisconnect:
        logger.debug("Session %s closed by client", session_id[:8])
    finally:
        await stream.close()
        manager.disconnect(session_id)
