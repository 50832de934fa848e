"""Logging configuration for designbridge.

Verbosity runs error(0), warning(1), info(2), verbose(3), trace(4):

- ``verbose`` adds one line per relayed command and its reply
- ``trace`` adds the raw wire frames, clipped to ``FRAME_PREVIEW`` characters

Output goes to the configured file, or ``DESIGNBRIDGE_LOG``, or stderr.
Never stdout: in bridge mode it carries the MCP stdio stream.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from designbridge.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("designbridge")

# Export replies carry whole images as base64.
FRAME_PREVIEW = 300

# Chatty below WARNING; let them through only when tracing.
_LIBRARY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "websockets", "mcp")

_initialized = False

_LEVEL_MAP = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_VERBOSITY_MAP = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: VERBOSE,
    4: TRACE,
}


class _LowercaseLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Pick the effective level: verbose (int) wins over level (str)."""
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        return _VERBOSITY_MAP.get(config.verbose, TRACE)
    if config.level:
        return _LEVEL_MAP.get(config.level.upper(), logging.INFO)
    return logging.INFO


def trace_frame(log: logging.Logger, direction: str, data: str | bytes) -> None:
    """Log one raw wire frame at TRACE."""
    if not log.isEnabledFor(TRACE):
        return
    text = data if isinstance(data, str) else f"<{len(data)} binary bytes>"
    if len(text) > FRAME_PREVIEW:
        text = f"{text[:FRAME_PREVIEW]}... ({len(text)} chars)"
    log.log(TRACE, "%s %s", direction, text)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Initialize logging once at startup; later calls are no-ops."""
    global _initialized
    if _initialized:
        return
    _initialized = True

    log_level = resolve_level(config)
    logger.setLevel(log_level)
    library_level = logging.DEBUG if log_level <= TRACE else logging.WARNING
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    formatter = _LowercaseLevelFormatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s", datefmt="%H:%M:%S"
    )

    log_path = config.file if config and config.file else os.environ.get("DESIGNBRIDGE_LOG")

    if log_path:
        log_path = os.path.expanduser(log_path)
        try:
            handler: logging.Handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        except OSError as e:
            print(f"[designbridge] Failed to open log file: {e}", file=sys.stderr)
            handler = logging.StreamHandler(sys.stderr)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
