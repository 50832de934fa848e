"""Tests for BridgeRuntime channel events and routing."""

import asyncio
import json

import pytest

from designbridge.bridge import BridgeRuntime
from designbridge.config import BridgeConfig
from designbridge.errors import NotConnectedError, RequestTimeoutError
from designbridge.protocol import PONG
from designbridge.worker import WorkerSession
from tests.utils import LoopbackChannel, MockChannel


class TestChannelEvents:
    """Tests for open/message/close handling."""

    async def test_pong_marks_alive(self, runtime: BridgeRuntime, mock_channel: MockChannel) -> None:
        runtime.channel_opened(mock_channel)
        runtime.channel_message(mock_channel, PONG)
        assert runtime.status()["lastPong"] is not None

    async def test_status_reports_pending(self, runtime: BridgeRuntime, mock_channel: MockChannel) -> None:
        runtime.channel_opened(mock_channel)
        task = asyncio.create_task(runtime.send("get_selection"))
        await asyncio.sleep(0)
        status = runtime.status()
        assert status["connected"] is True
        assert status["pendingRequests"] == 1
        assert status["requestTimeout"] == 0.5
        frame = json.loads(mock_channel.sent[0])
        runtime.channel_message(mock_channel, json.dumps({"id": frame["id"], "result": {}}))
        await task

    async def test_close_keeps_pending_by_default(
        self, runtime: BridgeRuntime, mock_channel: MockChannel
    ) -> None:
        runtime.channel_opened(mock_channel)
        task = asyncio.create_task(runtime.send("get_selection"))
        await asyncio.sleep(0)
        runtime.channel_closed(mock_channel)
        assert runtime.correlator.pending_count == 1
        with pytest.raises(RequestTimeoutError):
            await task

    async def test_close_fails_pending_when_configured(self) -> None:
        runtime = BridgeRuntime(
            BridgeConfig(request_timeout=5, heartbeat_interval=0, fail_pending_on_disconnect=True)
        )
        channel = MockChannel()
        runtime.channel_opened(channel)
        task = asyncio.create_task(runtime.send("get_selection"))
        await asyncio.sleep(0)
        runtime.channel_closed(channel)
        with pytest.raises(NotConnectedError, match="disconnected"):
            await task
        await runtime.close()

    async def test_close_of_replaced_channel_keeps_pending(self) -> None:
        runtime = BridgeRuntime(
            BridgeConfig(request_timeout=0.2, heartbeat_interval=0, fail_pending_on_disconnect=True)
        )
        old, new = MockChannel(), MockChannel()
        runtime.channel_opened(old)
        runtime.channel_opened(new)
        task = asyncio.create_task(runtime.send("get_selection"))
        await asyncio.sleep(0)
        runtime.channel_closed(old)
        assert runtime.correlator.pending_count == 1
        assert runtime.connection.channel is new
        with pytest.raises(RequestTimeoutError):
            await task
        await runtime.close()


class TestReplacement:
    """A new worker channel takes over routing without errors."""

    async def test_commands_route_to_new_channel(self, runtime: BridgeRuntime) -> None:
        old_session, new_session = WorkerSession(), WorkerSession()
        old = LoopbackChannel(runtime, old_session)
        new = LoopbackChannel(runtime, new_session)

        runtime.channel_opened(old)
        await runtime.send("create_frame", {"name": "Before"})
        runtime.channel_opened(new)
        result = await runtime.send("create_frame", {"name": "After"})

        assert result["success"] is True
        assert len(old.sent) == 1
        assert len(new.sent) == 1
        assert [n.name for n in new_session.document.page.children] == ["After"]
        assert [n.name for n in old_session.document.page.children] == ["Before"]


class TestIsolation:
    """Runtimes share no state."""

    async def test_two_runtimes_are_independent(self) -> None:
        first = BridgeRuntime(BridgeConfig(heartbeat_interval=0))
        second = BridgeRuntime(BridgeConfig(heartbeat_interval=0))
        first.channel_opened(MockChannel())
        assert first.connection.is_connected
        assert not second.connection.is_connected
        await first.close()
        await second.close()
