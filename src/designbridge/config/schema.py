"""Configuration schema dataclasses for designbridge.

All fields have defaults so partial configs merge together cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9001


@dataclass
class BridgeConfig:
    """Bridge process settings.

    Example config.yaml:
        bridge:
          port: 9001
          request_timeout: 10
          heartbeat_interval: 15
          fail_pending_on_disconnect: false
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    request_timeout: float = 10.0  # Seconds before a pending request is rejected
    heartbeat_interval: float = 15.0  # Seconds between liveness pings
    fail_pending_on_disconnect: bool = False  # Reject pending requests when the worker drops


@dataclass
class WorkerConfig:
    """Reference worker settings."""

    url: str = f"ws://{DEFAULT_HOST}:{DEFAULT_PORT}/"
    reconnect_delay: float = 2.0  # Seconds to wait before reconnecting


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level
    file: str | None = None  # Log file path


@dataclass
class Config:
    """Root configuration object."""

    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    worker: WorkerConfig = field(default_factory=WorkerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Unknown top-level sections, kept for extensions
    extra: dict[str, Any] = field(default_factory=dict)
