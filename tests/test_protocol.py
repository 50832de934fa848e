"""Tests for the bridge/worker wire messages."""

import json

import pytest

from designbridge.protocol import (
    UNKNOWN_COMMAND,
    CommandReply,
    CommandRequest,
    ProtocolError,
    decode_reply,
    decode_request,
)


class TestCommandRequest:
    """Tests for request encoding and validation."""

    def test_encode_is_compact_json(self) -> None:
        """Requests encode as {id, command, params} without whitespace."""
        raw = CommandRequest(id="abc", command="move_node", params={"x": 1}).encode()
        assert raw == '{"id":"abc","command":"move_node","params":{"x":1}}'

    def test_missing_params_default_to_empty(self) -> None:
        request = decode_request('{"id": "1", "command": "get_selection"}')
        assert request.params == {}

    @pytest.mark.parametrize(
        "frame",
        [
            '{"command": "x"}',
            '{"id": "", "command": "x"}',
            '{"id": "1"}',
            '{"id": "1", "command": "x", "params": [1]}',
            "[1, 2]",
            "not json",
        ],
    )
    def test_invalid_requests_raise(self, frame: str) -> None:
        with pytest.raises(ProtocolError):
            decode_request(frame)


class TestCommandReply:
    """Tests for reply encoding and decoding."""

    def test_result_reply(self) -> None:
        reply = decode_reply('{"id": "1", "result": {"success": true}}')
        assert not reply.is_error
        assert reply.result == {"success": True}

    def test_error_reply_keeps_code(self) -> None:
        reply = decode_reply('{"id": "1", "error": "Unknown command: x", "code": "unknown_command"}')
        assert reply.is_error
        assert reply.error == "Unknown command: x"
        assert reply.code == UNKNOWN_COMMAND

    def test_error_without_code_encodes_plain_shape(self) -> None:
        """Readers that ignore 'code' see {id, error}."""
        data = json.loads(CommandReply(id="1", error="boom").encode())
        assert data == {"id": "1", "error": "boom"}

    def test_empty_error_counts_as_success(self) -> None:
        reply = decode_reply('{"id": "1", "error": "", "result": 5}')
        assert not reply.is_error
        assert reply.result == 5

    def test_reply_without_id_raises(self) -> None:
        with pytest.raises(ProtocolError):
            decode_reply('{"result": 1}')
