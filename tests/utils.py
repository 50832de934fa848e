"""Shared test utilities for designbridge tests."""

from __future__ import annotations

import asyncio

from designbridge.bridge import BridgeRuntime
from designbridge.protocol import PING, PONG
from designbridge.worker import WorkerSession


class MockChannel:
    """Mock worker channel recording every frame sent to it."""

    def __init__(self, should_fail: bool = False):
        self.should_fail = should_fail
        self.sent: list[str] = []

    async def send_text(self, data: str) -> None:
        if self.should_fail:
            raise ConnectionError("WebSocket connection failed")
        self.sent.append(data)


class LoopbackChannel:
    """Channel that hands frames to an in-process worker session.

    Frames are answered one at a time, like the real worker client, and
    replies are fed back into the runtime as if they arrived on the socket.
    """

    def __init__(self, runtime: BridgeRuntime, session: WorkerSession):
        self.runtime = runtime
        self.session = session
        self.sent: list[str] = []
        self.silent = False
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    async def send_text(self, data: str) -> None:
        self.sent.append(data)
        if data == PING:
            self.runtime.channel_message(self, PONG)
            return
        if self.silent:
            return
        task = asyncio.create_task(self._answer(data))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _answer(self, data: str) -> None:
        async with self._lock:
            reply = await self.session.handle_text(data)
        if reply is not None:
            self.runtime.channel_message(self, reply)

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
