"""Tests for the FastAPI listener the worker connects to."""

import pytest
from fastapi.testclient import TestClient

from designbridge.bridge import BridgeRuntime
from designbridge.bridge.server import Listener, create_app
from designbridge.config import BridgeConfig
from designbridge.protocol import PING, PONG


@pytest.fixture
def sync_runtime() -> BridgeRuntime:
    """Runtime whose heartbeat fires quickly enough to observe."""
    return BridgeRuntime(BridgeConfig(request_timeout=1, heartbeat_interval=0.05))


@pytest.fixture
def client(sync_runtime: BridgeRuntime) -> TestClient:
    return TestClient(create_app(sync_runtime))


class TestStatusRoute:
    """Tests for GET /api/status."""

    def test_status_without_worker(self, client: TestClient) -> None:
        response = client.get("/api/status")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["connected"] is False
        assert data["pendingRequests"] == 0

    def test_status_while_worker_connected(self, client: TestClient) -> None:
        with client.websocket_connect("/") as websocket:
            assert websocket.receive_text() == PING
            assert client.get("/api/status").json()["connected"] is True


class TestWorkerEndpoint:
    """Tests for the WebSocket endpoint."""

    def test_attach_and_detach(self, client: TestClient, sync_runtime: BridgeRuntime) -> None:
        with client.websocket_connect("/") as websocket:
            websocket.receive_text()
            assert sync_runtime.connection.is_connected
        assert not sync_runtime.connection.is_connected

    def test_ping_is_sent(self, client: TestClient) -> None:
        """The bridge pings the worker periodically."""
        with client.websocket_connect("/") as websocket:
            assert websocket.receive_text() == PING
            websocket.send_text(PONG)
            assert websocket.receive_text() == PING

    def test_garbage_frames_do_not_close_channel(
        self, client: TestClient, sync_runtime: BridgeRuntime
    ) -> None:
        with client.websocket_connect("/") as websocket:
            websocket.send_text("not json")
            websocket.send_text('{"id": "unknown", "result": 1}')
            assert websocket.receive_text() == PING
            assert sync_runtime.connection.is_connected

    def test_binary_frames_are_decoded(
        self, client: TestClient, sync_runtime: BridgeRuntime, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        received = []
        original = sync_runtime.channel_message

        def recording(channel, data):
            received.append(data)
            original(channel, data)

        monkeypatch.setattr(sync_runtime, "channel_message", recording)
        with client.websocket_connect("/") as websocket:
            websocket.receive_text()
            websocket.send_bytes(b"\xff\xfe not utf-8")
            websocket.send_bytes(PONG.encode())
            assert websocket.receive_text() == PING
            assert sync_runtime.connection.is_connected
        assert received == [PONG]


class TestListenerLifecycle:
    """Tests for the Listener wrapper."""

    async def test_stop_without_start_is_noop(self, sync_runtime: BridgeRuntime) -> None:
        listener = Listener(sync_runtime)
        assert not listener.running
        await listener.stop()
        assert not listener.running

    def test_status_reports_listener_state(self, sync_runtime: BridgeRuntime) -> None:
        listener = Listener(sync_runtime)
        data = TestClient(create_app(sync_runtime, listener)).get("/api/status").json()
        assert data["port"] is None
        assert data["uptime"] == 0
