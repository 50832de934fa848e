"""Wire messages exchanged between the bridge and the worker.

Requests travel bridge → worker as ``{"id", "command", "params"}``; replies
travel back as ``{"id", "result"}`` or ``{"id", "error", "code"?}``. Liveness
heartbeats are the bare text frames ``ping`` and ``pong``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

PING = "ping"
PONG = "pong"

# Reply error codes
UNKNOWN_COMMAND = "unknown_command"
HANDLER_ERROR = "handler_error"
INVALID_REQUEST = "invalid_request"


class ProtocolError(ValueError):
    """A frame could not be decoded into a wire message."""


@dataclass
class CommandRequest:
    """One command addressed to the worker."""

    id: str
    command: str
    params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "command": self.command, "params": self.params}

    def encode(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommandRequest:
        request_id = data.get("id")
        command = data.get("command")
        if not isinstance(request_id, str) or not request_id:
            raise ProtocolError("Request is missing a string 'id'")
        if not isinstance(command, str) or not command:
            raise ProtocolError(f"Request {request_id} is missing a string 'command'")
        params = data.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ProtocolError(f"Request {request_id} has non-object 'params'")
        return cls(id=request_id, command=command, params=params)


@dataclass
class CommandReply:
    """The worker's answer to one CommandRequest."""

    id: str
    result: Any = None
    error: str | None = None
    code: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            d: dict[str, Any] = {"id": self.id, "error": self.error}
            if self.code is not None:
                d["code"] = self.code
            return d
        return {"id": self.id, "result": self.result}

    def encode(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommandReply:
        reply_id = data.get("id")
        if not isinstance(reply_id, str):
            raise ProtocolError("Reply is missing a string 'id'")
        error = data.get("error")
        if error is not None and not isinstance(error, str):
            error = str(error)
        return cls(
            id=reply_id,
            result=data.get("result"),
            error=error or None,
            code=data.get("code"),
        )


def decode_object(raw: str | bytes) -> dict[str, Any]:
    """Parse one JSON frame, insisting on a top-level object."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProtocolError(f"Malformed frame: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError("Frame is not a JSON object")
    return data


def decode_request(raw: str | bytes) -> CommandRequest:
    return CommandRequest.from_dict(decode_object(raw))


def decode_reply(raw: str | bytes) -> CommandReply:
    return CommandReply.from_dict(decode_object(raw))
