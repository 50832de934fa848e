"""WebSocket listener the worker connects to.

A FastAPI app served by uvicorn inside the bridge's event loop, next to
the MCP stdio server.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Any

from fastapi import FastAPI, WebSocket

from designbridge import __version__
from designbridge.bridge.runtime import BridgeRuntime

log = logging.getLogger(__name__)


def _frame_text(message: dict[str, Any]) -> str | None:
    """Text of one received frame; binary frames are decoded as UTF-8."""
    text = message.get("text")
    if text is not None:
        return text
    data = message.get("bytes") or b""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        log.warning("Ignoring binary frame that is not UTF-8 (%d bytes)", len(data))
        return None


def create_app(runtime: BridgeRuntime, listener: Listener | None = None) -> FastAPI:
    """Create the listener app bound to ``runtime``."""
    app = FastAPI(
        title="designbridge",
        description="Command bridge between MCP tool calls and a design worker",
        version=__version__,
    )

    @app.get("/api/status")
    async def api_status() -> dict[str, Any]:
        return {
            "status": "ok",
            "uptime": listener.uptime if listener else 0,
            "port": listener.port if listener else None,
            **runtime.status(),
        }

    @app.websocket("/")
    async def worker_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        runtime.channel_opened(websocket)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                text = _frame_text(message)
                if text is not None:
                    runtime.channel_message(websocket, text)
        finally:
            runtime.channel_closed(websocket)

    return app


class Listener:
    """Uvicorn serving the worker endpoint in a background task."""

    def __init__(self, runtime: BridgeRuntime) -> None:
        self.runtime = runtime
        self.port: int | None = None
        self._server: Any = None
        self._task: asyncio.Task[None] | None = None
        self._start_time: float | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def uptime(self) -> float:
        return time.time() - self._start_time if self._start_time else 0

    async def start(self, host: str, port: int) -> None:
        if self.running:
            raise RuntimeError(f"Listener already running on port {self.port}")

        import uvicorn

        config = uvicorn.Config(
            create_app(self.runtime, self),
            host=host,
            port=port,
            log_level="warning",
            access_log=False,
            ws_ping_interval=None,
        )
        self._server = uvicorn.Server(config)
        self._task = asyncio.create_task(self._server.serve())
        self.port = port
        self._start_time = time.time()

        log.info("WebSocket server listening on ws://%s:%d/", host, port)

    async def stop(self) -> None:
        """Stop the listener if it is running."""
        if self._task is None:
            return

        self._server.should_exit = True
        try:
            await asyncio.wait_for(self._task, timeout=2.0)
        except asyncio.TimeoutError:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

        log.info("Listener stopped (was on port %s)", self.port)

        self._task = None
        self._server = None
        self.port = None
        self._start_time = None
