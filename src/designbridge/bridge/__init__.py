"""Bridge side: worker channel, request correlation, WebSocket listener."""

from designbridge.bridge.connection import Channel, ConnectionManager
from designbridge.bridge.correlator import PendingRequest, RequestCorrelator
from designbridge.bridge.runtime import BridgeRuntime

__all__ = [
    "BridgeRuntime",
    "Channel",
    "ConnectionManager",
    "PendingRequest",
    "RequestCorrelator",
]
