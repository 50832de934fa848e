"""Request/reply correlation over the worker channel."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from designbridge.bridge.connection import ConnectionManager
from designbridge.errors import (
    HandlerError,
    NotConnectedError,
    RequestTimeoutError,
    UnknownCommandError,
)
from designbridge.logging import VERBOSE, trace_frame
from designbridge.protocol import (
    UNKNOWN_COMMAND,
    CommandReply,
    CommandRequest,
    ProtocolError,
    decode_reply,
)

log = logging.getLogger(__name__)


def short_id() -> str:
    """Short random request id."""
    return uuid.uuid4().hex[:10]


@dataclass
class PendingRequest:
    """An in-flight request waiting for its reply or its timeout."""

    id: str
    command: str
    future: asyncio.Future[Any]
    timeout_handle: asyncio.TimerHandle | None = None


class RequestCorrelator:
    """Matches worker replies to outstanding requests by id.

    Each pending entry is removed by whichever comes first, the reply or the
    timer, so it settles exactly once. Replies for ids that are no longer
    pending are dropped without error.
    """

    def __init__(
        self,
        connection: ConnectionManager,
        timeout: float = 10.0,
        id_factory: Callable[[], str] = short_id,
    ) -> None:
        self.connection = connection
        self.timeout = timeout
        self._id_factory = id_factory
        self._pending: dict[str, PendingRequest] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, request_id: str) -> bool:
        return request_id in self._pending

    async def send(self, command: str, params: dict[str, Any] | None = None) -> Any:
        """Send a command to the worker and wait for its result.

        Raises:
            NotConnectedError: No worker channel, or the send failed.
            RequestTimeoutError: No reply within ``timeout`` seconds.
            UnknownCommandError: The worker has no such command.
            HandlerError: The worker's handler raised.
        """
        channel = self.connection.channel
        if channel is None:
            raise NotConnectedError()

        loop = asyncio.get_running_loop()
        request = CommandRequest(id=self._id_factory(), command=command, params=params or {})
        pending = PendingRequest(id=request.id, command=command, future=loop.create_future())
        self._pending[request.id] = pending

        try:
            frame = request.encode()
            trace_frame(log, ">>", frame)
            await channel.send_text(frame)
        except Exception as e:
            self._pending.pop(request.id, None)
            raise NotConnectedError(f"Failed to send to worker: {e}") from e

        if request.id in self._pending:
            pending.timeout_handle = loop.call_later(self.timeout, self._expire, request.id)
        log.log(VERBOSE, ">> %s (id=%s)", command, request.id)

        try:
            return await pending.future
        finally:
            # Cancelled waiters must not leave a live entry behind.
            self._discard(request.id, pending)

    def handle_message(self, raw: str | bytes) -> bool:
        """Route one inbound frame to its pending request.

        Returns:
            True if a pending request was settled.
        """
        try:
            reply = decode_reply(raw)
        except ProtocolError as e:
            log.warning("Failed to parse worker message: %s", e)
            return False
        return self.handle_reply(reply)

    def handle_reply(self, reply: CommandReply) -> bool:
        pending = self._pending.pop(reply.id, None)
        if pending is None:
            log.debug("Dropping reply for unknown or expired id %s", reply.id)
            return False
        if pending.timeout_handle is not None:
            pending.timeout_handle.cancel()
        if pending.future.done():
            return False

        if reply.is_error:
            log.log(VERBOSE, "<< %s (id=%s) error: %s", pending.command, reply.id, reply.error)
            if reply.code == UNKNOWN_COMMAND:
                pending.future.set_exception(UnknownCommandError(pending.command))
            else:
                pending.future.set_exception(HandlerError(reply.error))
        else:
            log.log(VERBOSE, "<< %s (id=%s)", pending.command, reply.id)
            pending.future.set_result(reply.result)
        return True

    def fail_all(self, exc: Exception) -> int:
        """Reject every pending request with ``exc``."""
        pending_requests = list(self._pending.values())
        self._pending.clear()
        for pending in pending_requests:
            if pending.timeout_handle is not None:
                pending.timeout_handle.cancel()
            if not pending.future.done():
                pending.future.set_exception(exc)
        if pending_requests:
            log.info("Failed %d pending request(s): %s", len(pending_requests), exc)
        return len(pending_requests)

    def _expire(self, request_id: str) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is None:
            return
        log.warning("Request %s (%s) timed out after %gs", request_id, pending.command, self.timeout)
        if not pending.future.done():
            pending.future.set_exception(RequestTimeoutError(pending.command, self.timeout))

    def _discard(self, request_id: str, pending: PendingRequest) -> None:
        if self._pending.get(request_id) is pending:
            del self._pending[request_id]
        if pending.timeout_handle is not None:
            pending.timeout_handle.cancel()
