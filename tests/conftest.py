"""Root pytest configuration for all tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from designbridge.bridge import BridgeRuntime
from designbridge.config import BridgeConfig, reset_config
from designbridge.worker import WorkerSession
from tests.utils import LoopbackChannel, MockChannel


@pytest.fixture(scope="session")
def anyio_backend():
    """Set anyio backend to asyncio."""
    return "asyncio"


@pytest.fixture
def mock_channel() -> MockChannel:
    """Create a mock channel."""
    return MockChannel()


@pytest.fixture
def session() -> WorkerSession:
    """Fresh worker session with an empty document."""
    return WorkerSession()


@pytest.fixture
async def runtime() -> AsyncIterator[BridgeRuntime]:
    """Bridge runtime with a short timeout and no heartbeat."""
    rt = BridgeRuntime(BridgeConfig(request_timeout=0.5, heartbeat_interval=0))
    yield rt
    await rt.close()


@pytest.fixture
async def loopback(
    runtime: BridgeRuntime, session: WorkerSession
) -> AsyncIterator[LoopbackChannel]:
    """Worker session attached to ``runtime`` through an in-memory channel."""
    channel = LoopbackChannel(runtime, session)
    runtime.channel_opened(channel)
    yield channel
    await channel.drain()


@pytest.fixture(autouse=True)
def _fresh_config():
    """Never leak a cached config between tests."""
    reset_config()
    yield
    reset_config()
