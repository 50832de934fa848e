"""Single-channel connection manager for the worker WebSocket."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Any, Protocol

from designbridge.protocol import PING

log = logging.getLogger(__name__)


class Channel(Protocol):
    """The slice of a WebSocket the bridge needs."""

    async def send_text(self, data: str) -> None: ...


class ConnectionManager:
    """Owns the one active worker channel and its heartbeat task.

    A new channel replaces the current one unconditionally; the replaced
    channel is not closed and keeps its own heartbeat until it disconnects.
    """

    def __init__(self, heartbeat_interval: float = 15.0) -> None:
        self.heartbeat_interval = heartbeat_interval
        self._channel: Channel | None = None
        self._heartbeats: dict[int, asyncio.Task[None]] = {}
        self._last_pong: float | None = None
        self._connected_at: float | None = None

    @property
    def channel(self) -> Channel | None:
        return self._channel

    @property
    def is_connected(self) -> bool:
        return self._channel is not None

    @property
    def last_pong(self) -> float | None:
        return self._last_pong

    def attach(self, channel: Channel) -> None:
        """Make ``channel`` the active channel and start probing it."""
        if self._channel is not None and self._channel is not channel:
            log.info("Worker reconnected, replacing previous channel")
        else:
            log.info("Worker connected")
        self._channel = channel
        self._connected_at = time.time()
        self._last_pong = None
        self._start_heartbeat(channel)

    def detach(self, channel: Channel) -> bool:
        """Forget ``channel`` after it closed.

        Returns:
            True if it was the active channel.
        """
        self._stop_heartbeat(channel)
        if self._channel is not channel:
            log.debug("Replaced worker channel closed")
            return False
        log.info("Worker disconnected")
        self._channel = None
        self._connected_at = None
        return True

    def mark_alive(self, channel: Channel) -> None:
        """Record a pong. Informational only; nothing is failed on silence."""
        if channel is self._channel:
            self._last_pong = time.time()
            log.debug("Worker pong received")

    def status(self) -> dict[str, Any]:
        return {
            "connected": self.is_connected,
            "connectedAt": self._connected_at,
            "lastPong": self._last_pong,
        }

    async def close(self) -> None:
        """Stop every heartbeat task. Channels themselves are left to their owners."""
        tasks = list(self._heartbeats.values())
        self._heartbeats.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._channel = None

    def _start_heartbeat(self, channel: Channel) -> None:
        key = id(channel)
        existing = self._heartbeats.pop(key, None)
        if existing is not None:
            existing.cancel()
        if self.heartbeat_interval > 0:
            self._heartbeats[key] = asyncio.create_task(self._heartbeat(channel))

    def _stop_heartbeat(self, channel: Channel) -> None:
        task = self._heartbeats.pop(id(channel), None)
        if task is not None:
            task.cancel()

    async def _heartbeat(self, channel: Channel) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            try:
                await channel.send_text(PING)
            except Exception as e:
                log.debug("Liveness ping failed: %s", e)
                return
