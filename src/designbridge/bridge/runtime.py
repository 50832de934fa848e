"""Bridge runtime: the connection and correlator of one bridge instance."""

from __future__ import annotations

import logging
from typing import Any

from designbridge.bridge.connection import Channel, ConnectionManager
from designbridge.bridge.correlator import RequestCorrelator
from designbridge.config.schema import BridgeConfig
from designbridge.errors import NotConnectedError
from designbridge.logging import trace_frame
from designbridge.protocol import PONG

log = logging.getLogger(__name__)


class BridgeRuntime:
    """Holds the mutable state of one bridge.

    Tests construct as many isolated runtimes as they need; the process
    entry point builds exactly one.
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        connection: ConnectionManager | None = None,
        correlator: RequestCorrelator | None = None,
    ) -> None:
        self.config = config or BridgeConfig()
        self.connection = connection or ConnectionManager(
            heartbeat_interval=self.config.heartbeat_interval
        )
        self.correlator = correlator or RequestCorrelator(
            self.connection, timeout=self.config.request_timeout
        )

    async def send(self, command: str, params: dict[str, Any] | None = None) -> Any:
        return await self.correlator.send(command, params)

    def channel_opened(self, channel: Channel) -> None:
        self.connection.attach(channel)

    def channel_message(self, channel: Channel, data: str) -> None:
        trace_frame(log, "<<", data)
        if data == PONG:
            self.connection.mark_alive(channel)
            return
        self.correlator.handle_message(data)

    def channel_closed(self, channel: Channel) -> None:
        was_current = self.connection.detach(channel)
        if was_current and self.config.fail_pending_on_disconnect:
            self.correlator.fail_all(NotConnectedError("Design worker disconnected"))

    def status(self) -> dict[str, Any]:
        return {
            **self.connection.status(),
            "pendingRequests": self.correlator.pending_count,
            "requestTimeout": self.correlator.timeout,
        }

    async def close(self) -> None:
        await self.connection.close()
        self.correlator.fail_all(NotConnectedError("Bridge shutting down"))
