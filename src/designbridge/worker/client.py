"""WebSocket client that connects a worker session to the bridge."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake

from designbridge.logging import trace_frame
from designbridge.protocol import PING, PONG
from designbridge.worker.session import WorkerSession

log = logging.getLogger(__name__)


class WorkerClient:
    """Keeps one worker session attached to the bridge listener.

    Frames are handled strictly one after another, so commands from the
    bridge never interleave. After a disconnect the client waits
    ``reconnect_delay`` seconds and dials again until :meth:`stop`.
    """

    def __init__(
        self,
        session: WorkerSession,
        url: str,
        reconnect_delay: float = 2.0,
    ) -> None:
        self.session = session
        self.url = url
        self.reconnect_delay = reconnect_delay
        self._stopping = asyncio.Event()
        self._websocket: Any = None

    @property
    def connected(self) -> bool:
        return self._websocket is not None

    async def serve(self, websocket: Any) -> None:
        """Answer frames on one open connection until it closes."""
        try:
            async for message in websocket:
                trace_frame(log, "<<", message)
                if isinstance(message, bytes):
                    try:
                        message = message.decode("utf-8")
                    except UnicodeDecodeError:
                        log.warning("Ignoring binary frame that is not UTF-8 (%d bytes)", len(message))
                        continue
                if message == PING:
                    await websocket.send(PONG)
                    continue
                reply = await self.session.handle_text(message)
                if reply is not None:
                    trace_frame(log, ">>", reply)
                    await websocket.send(reply)
        except ConnectionClosed as e:
            log.info("Bridge connection closed: %s", e)

    async def run(self) -> None:
        while not self._stopping.is_set():
            try:
                async with connect(self.url, ping_interval=None) as websocket:
                    self._websocket = websocket
                    log.info("Connected to bridge at %s", self.url)
                    await self.serve(websocket)
            except (OSError, InvalidHandshake, asyncio.TimeoutError) as e:
                log.warning("Cannot reach bridge at %s: %s", self.url, e)
            finally:
                self._websocket = None

            if self._stopping.is_set():
                break
            log.debug("Reconnecting in %gs", self.reconnect_delay)
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stopping.wait(), self.reconnect_delay)

    async def stop(self) -> None:
        self._stopping.set()
        if self._websocket is not None:
            await self._websocket.close()
