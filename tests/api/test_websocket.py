"""Tests for the live shoe WebSocket."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from api.main import app
from api.schemas import AnalysisSettings
from api.websocket import AnalysisStream, manager
from core.cards import Rank
from core.shoe import ShoeState
from core.tracker import ShoeTracker


@pytest.fixture
def test_client(memory_store):
    """Synchronous client for WebSocket tests."""
    with TestClient(app) as client:
        yield client


def _new_session(client: TestClient) -> str:
    return client.post("/api/shoe/new", json={"num_decks": 1}).json()["session_id"]


def test_live_analysis_follows_cards(test_client):
    session_id = _new_session(test_client)

    with test_client.websocket_connect(f"/ws/shoe/{session_id}") as ws:
        state = ws.receive_json()
        assert state["type"] == "state"
        assert state["state"]["total_cards"] == 52

        analysis = ws.receive_json()
        assert analysis["type"] == "analysis"
        assert analysis["analysis"]["version"] == 0
        assert analysis["analysis"]["total_cards"] == 52

        ws.send_json({"type": "card", "rank": "9"})
        state = ws.receive_json()
        assert state["state"]["version"] == 1
        assert state["state"]["counts"]["9"] == 3

        analysis = ws.receive_json()
        assert analysis["analysis"]["version"] == 1
        assert analysis["analysis"]["total_cards"] == 51

    # Mutations are persisted for the REST endpoints.
    response = test_client.get("/api/shoe/state", headers={"X-Session-ID": session_id})
    assert response.json()["cards_dealt"] == 1


def test_settings_trigger_analysis(test_client):
    session_id = _new_session(test_client)

    with test_client.websocket_connect(f"/ws/shoe/{session_id}") as ws:
        ws.receive_json()
        ws.receive_json()

        ws.send_json({"type": "settings", "capital": 0})
        analysis = ws.receive_json()

        assert analysis["type"] == "analysis"
        assert all(r["stake"] == 0 for r in analysis["analysis"]["recommendations"])


def test_bad_messages_return_errors(test_client):
    session_id = _new_session(test_client)

    with test_client.websocket_connect(f"/ws/shoe/{session_id}") as ws:
        ws.receive_json()
        ws.receive_json()

        ws.send_text("{not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid JSON"}

        ws.send_json({"type": "card", "rank": "Z"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "settings", "kelly_fraction": 3})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "shuffle"})
        assert ws.receive_json()["message"] == "Unknown message type: shuffle"

        ws.send_json({"type": "get_state"})
        state = ws.receive_json()
        assert state["type"] == "state"
        assert state["state"]["version"] == 0


def test_unknown_session_is_closed(test_client):
    with test_client.websocket_connect("/ws/shoe/not-a-session") as ws:
        assert ws.receive_json() == {"type": "error", "message": "Unknown session"}
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()

    assert exc_info.value.code == 4404


class TestAnalysisStream:
    """Tests for stale result handling."""

    @pytest.mark.asyncio
    async def test_current_result_is_sent(self):
        websocket = AsyncMock()
        stream = AnalysisStream(websocket, ShoeTracker(num_decks=1))

        await stream._compute(stream.key, ShoeState.from_mapping({Rank.NINE: 10}), stream.settings)

        websocket.send_json.assert_awaited_once()
        message = websocket.send_json.await_args.args[0]
        assert message["type"] == "analysis"
        assert message["analysis"]["version"] == 0

    @pytest.mark.asyncio
    async def test_result_for_old_version_is_dropped(self):
        websocket = AsyncMock()
        tracker = ShoeTracker(num_decks=1)
        stream = AnalysisStream(websocket, tracker)
        key = stream.key

        tracker.record(Rank.NINE)
        await stream._compute(key, ShoeState.from_mapping({Rank.NINE: 10}), stream.settings)

        websocket.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_result_for_old_settings_is_dropped(self):
        websocket = AsyncMock()
        stream = AnalysisStream(websocket, ShoeTracker(num_decks=1))
        key = stream.key

        stream.update_settings(AnalysisSettings(capital=5))
        await stream._compute(key, ShoeState.from_mapping({Rank.NINE: 10}), stream.settings)

        websocket.send_json.assert_not_awaited()
        assert stream.key == (0, 1)

    @pytest.mark.asyncio
    async def test_send_failure_is_logged(self, caplog):
        """A socket that closed mid-push does not crash the stream."""
        websocket = AsyncMock()
        websocket.send_json.side_effect = RuntimeError("socket closed")
        stream = AnalysisStream(websocket, ShoeTracker(num_decks=1))

        await stream._compute(stream.key, ShoeState.from_mapping({Rank.NINE: 10}), stream.settings)

        assert "Analysis push failed" in caplog.text

    @pytest.mark.asyncio
    async def test_close_after_failed_push(self):
        websocket = AsyncMock()
        websocket.send_json.side_effect = RuntimeError("socket closed")
        stream = AnalysisStream(websocket, ShoeTracker(num_decks=1))

        stream.refresh()
        await asyncio.sleep(0)
        await stream.close()


def test_rejected_payouts_are_reported(test_client):
    session_id = _new_session(test_client)

    with test_client.websocket_connect(f"/ws/shoe/{session_id}") as ws:
        ws.receive_json()
        ws.receive_json()

        ws.send_json({"type": "settings", "payouts": {"super6": 20}})
        message = ws.receive_json()

        assert message["type"] == "error"
        assert "Super 6" in message["message"]


def test_connection_count(test_client):
    session_id = _new_session(test_client)
    before = manager.active_connections

    with test_client.websocket_connect(f"/ws/shoe/{session_id}") as ws:
        ws.receive_json()
        assert manager.active_connections == before + 1

    assert manager.active_connections == before
