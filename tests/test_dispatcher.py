"""Tests for frame-level request dispatch in the worker."""

import json
import logging

import pytest

from designbridge.protocol import (
    HANDLER_ERROR,
    INVALID_REQUEST,
    UNKNOWN_COMMAND,
    CommandRequest,
)
from designbridge.worker import WorkerSession
from designbridge.worker.dispatcher import Dispatcher
from designbridge.worker.registry import CommandRegistry
from designbridge.worker.results import ok


def request(command: str, params: dict | None = None, request_id: str = "r1") -> str:
    return json.dumps({"id": request_id, "command": command, "params": params or {}})


class TestDispatch:
    """Tests for Dispatcher.dispatch()."""

    async def test_success(self, session: WorkerSession) -> None:
        reply = await session.dispatcher.dispatch(
            CommandRequest(id="a", command="create_frame", params={"name": "F"})
        )
        assert not reply.is_error
        assert reply.result["name"] == "F"

    async def test_unknown_command(self, session: WorkerSession) -> None:
        reply = await session.dispatcher.dispatch(CommandRequest(id="a", command="fly"))
        assert reply.error == "Unknown command: fly"
        assert reply.code == UNKNOWN_COMMAND

    async def test_handler_exception(self, session: WorkerSession) -> None:
        reply = await session.dispatcher.dispatch(
            CommandRequest(id="a", command="get_node", params={"nodeId": "1:99"})
        )
        assert reply.error == "Node not found"
        assert reply.code == HANDLER_ERROR

    async def test_exception_without_message_uses_type_name(self) -> None:
        registry = CommandRegistry()

        async def broken(params):
            raise KeyError

        registry.add("broken", broken)
        reply = await Dispatcher(registry).dispatch(CommandRequest(id="a", command="broken"))
        assert reply.error == "KeyError"


class TestHandleText:
    """Tests for raw frame handling."""

    async def test_round_trip(self, session: WorkerSession) -> None:
        raw = await session.handle_text(request("create_rectangle", {"width": 10}, "req-7"))
        reply = json.loads(raw)
        assert reply["id"] == "req-7"
        assert reply["result"]["type"] == "RECTANGLE"
        assert "error" not in reply

    async def test_error_reply_has_code(self, session: WorkerSession) -> None:
        reply = json.loads(await session.handle_text(request("nope")))
        assert reply == {"id": "r1", "error": "Unknown command: nope", "code": UNKNOWN_COMMAND}

    async def test_garbage_is_dropped(
        self, session: WorkerSession, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="designbridge"):
            assert await session.handle_text("{not json") is None
        assert "Dropping unusable frame" in caplog.text

    async def test_non_object_is_dropped(self, session: WorkerSession) -> None:
        assert await session.handle_text("[1, 2]") is None

    async def test_missing_command_with_id_is_answered(self, session: WorkerSession) -> None:
        reply = json.loads(await session.handle_text(json.dumps({"id": "x1", "params": {}})))
        assert reply["id"] == "x1"
        assert reply["code"] == INVALID_REQUEST

    async def test_missing_id_is_dropped(self, session: WorkerSession) -> None:
        assert await session.handle_text(json.dumps({"command": "get_selection"})) is None

    async def test_unserializable_result(self) -> None:
        registry = CommandRegistry()

        async def opaque(params):
            return ok(value=object())

        registry.add("opaque", opaque)
        reply = json.loads(await Dispatcher(registry).handle_text(request("opaque")))
        assert reply["code"] == HANDLER_ERROR
        assert reply["error"].startswith("Result is not JSON serializable")

    async def test_state_persists_between_frames(self, session: WorkerSession) -> None:
        created = json.loads(await session.handle_text(request("create_frame", {"name": "F"}, "1")))
        node_id = created["result"]["nodeId"]
        fetched = json.loads(await session.handle_text(request("get_node", {"nodeId": node_id}, "2")))
        assert fetched["result"]["node"]["name"] == "F"
