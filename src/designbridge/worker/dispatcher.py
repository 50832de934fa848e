"""Turns one wire request into one wire reply."""

from __future__ import annotations

import logging

from designbridge.errors import UnknownCommandError
from designbridge.logging import VERBOSE
from designbridge.protocol import (
    HANDLER_ERROR,
    INVALID_REQUEST,
    UNKNOWN_COMMAND,
    CommandReply,
    CommandRequest,
    ProtocolError,
    decode_object,
)
from designbridge.worker.registry import CommandRegistry
from designbridge.worker.results import error_message

log = logging.getLogger(__name__)


class Dispatcher:
    """Runs requests against a registry and normalizes every failure.

    Nothing raised by a handler escapes :meth:`dispatch`; it becomes an
    error reply carrying the handler's message.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        self.registry = registry

    async def dispatch(self, request: CommandRequest) -> CommandReply:
        log.log(VERBOSE, "→ %s (%s)", request.command, request.id)
        try:
            result = await self.registry.invoke(request.command, request.params)
        except UnknownCommandError as e:
            log.warning("Unknown command %r", request.command)
            return CommandReply(id=request.id, error=str(e), code=UNKNOWN_COMMAND)
        except Exception as e:
            log.info("Command %s failed: %s", request.command, e)
            log.debug("Command %s traceback", request.command, exc_info=True)
            return CommandReply(id=request.id, error=error_message(e), code=HANDLER_ERROR)
        return CommandReply(id=request.id, result=result)

    async def handle_text(self, raw: str | bytes) -> str | None:
        """Decode, dispatch and encode one frame.

        Returns None when the frame is unusable and carries no id to answer.
        """
        try:
            data = decode_object(raw)
        except ProtocolError as e:
            log.warning("Dropping unusable frame: %s", e)
            return None

        try:
            request = CommandRequest.from_dict(data)
        except ProtocolError as e:
            request_id = data.get("id")
            if not isinstance(request_id, str) or not request_id:
                log.warning("Dropping unusable frame: %s", e)
                return None
            return CommandReply(id=request_id, error=str(e), code=INVALID_REQUEST).encode()

        reply = await self.dispatch(request)
        try:
            return reply.encode()
        except (TypeError, ValueError) as e:
            log.error("Result of %s is not JSON serializable: %s", request.command, e)
            return CommandReply(
                id=request.id,
                error=f"Result is not JSON serializable: {e}",
                code=HANDLER_ERROR,
            ).encode()
