"""Tests for log levels, frame tracing and logging setup."""

import logging
from collections.abc import Iterator

import pytest

from designbridge import logging as dblogging
from designbridge.bridge import BridgeRuntime
from designbridge.config import LoggingConfig
from designbridge.logging import (
    FRAME_PREVIEW,
    TRACE,
    VERBOSE,
    resolve_level,
    setup_logging,
    trace_frame,
)
from tests.utils import LoopbackChannel

log = logging.getLogger("designbridge.tests")


class TestResolveLevel:
    """Tests for resolve_level()."""

    @pytest.mark.parametrize(
        ("config", "level"),
        [
            (None, logging.INFO),
            (LoggingConfig(verbose=0), logging.ERROR),
            (LoggingConfig(verbose=3), VERBOSE),
            (LoggingConfig(verbose=4), TRACE),
            (LoggingConfig(level="debug"), logging.DEBUG),
            (LoggingConfig(level="trace", verbose=2), logging.INFO),
        ],
    )
    def test_levels(self, config: LoggingConfig | None, level: int) -> None:
        assert resolve_level(config) == level


class TestTraceFrame:
    """Tests for trace_frame()."""

    def test_long_frames_are_clipped(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(TRACE, logger="designbridge.tests")
        trace_frame(log, "<<", "x" * 5000)
        (record,) = caplog.records
        assert record.levelno == TRACE
        assert "(5000 chars)" in record.getMessage()
        assert len(record.getMessage()) < FRAME_PREVIEW + 50

    def test_binary_frames_are_summarized(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(TRACE, logger="designbridge.tests")
        trace_frame(log, "<<", b"\x00\x01\x02")
        assert "<3 binary bytes>" in caplog.text

    def test_silent_above_trace(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="designbridge.tests")
        trace_frame(log, ">>", "{}")
        assert caplog.records == []


class TestRelayLogging:
    """The bridge reports commands at VERBOSE and raw frames at TRACE."""

    async def test_verbose_shows_commands_not_frames(
        self, runtime: BridgeRuntime, loopback: LoopbackChannel, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(VERBOSE, logger="designbridge")
        await runtime.send("list_nodes", {})
        messages = [record.getMessage() for record in caplog.records]
        assert any(message.startswith(">> list_nodes") for message in messages)
        assert any(message.startswith("<< list_nodes") for message in messages)
        assert not any(record.levelno == TRACE for record in caplog.records)

    async def test_trace_adds_raw_frames(
        self, runtime: BridgeRuntime, loopback: LoopbackChannel, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(TRACE, logger="designbridge")
        await runtime.send("list_nodes", {})
        frames = [r.getMessage() for r in caplog.records if r.levelno == TRACE]
        assert any("list_nodes" in frame and frame.startswith(">>") for frame in frames)
        assert any(frame.startswith("<<") for frame in frames)


class TestSetupLogging:
    """Tests for setup_logging()."""

    @pytest.fixture(autouse=True)
    def fresh(self, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
        monkeypatch.setattr(dblogging, "_initialized", False)
        handlers = list(dblogging.logger.handlers)
        level = dblogging.logger.level
        library_levels = {name: logging.getLogger(name).level for name in dblogging._LIBRARY_LOGGERS}
        yield
        for handler in dblogging.logger.handlers:
            if handler not in handlers:
                handler.close()
        dblogging.logger.handlers[:] = handlers
        dblogging.logger.setLevel(level)
        for name, saved in library_levels.items():
            logging.getLogger(name).setLevel(saved)

    def test_libraries_are_quiet_unless_tracing(self) -> None:
        setup_logging(LoggingConfig(verbose=3))
        assert logging.getLogger("uvicorn").level == logging.WARNING
        assert dblogging.logger.level == VERBOSE

    def test_tracing_lets_libraries_through(self) -> None:
        setup_logging(LoggingConfig(verbose=4))
        assert logging.getLogger("mcp").level == logging.DEBUG

    def test_logs_to_file(self, tmp_path) -> None:
        path = tmp_path / "bridge.log"
        setup_logging(LoggingConfig(level="INFO", file=str(path)))
        dblogging.logger.getChild("tests").info("hello from the bridge")
        for handler in dblogging.logger.handlers:
            handler.flush()
        assert "info [designbridge.tests] hello from the bridge" in path.read_text()

    def test_second_call_is_noop(self) -> None:
        setup_logging(LoggingConfig(verbose=2))
        count = len(dblogging.logger.handlers)
        setup_logging(LoggingConfig(verbose=4))
        assert len(dblogging.logger.handlers) == count
