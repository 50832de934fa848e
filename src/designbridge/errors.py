"""Error taxonomy shared by the bridge and the worker."""

from __future__ import annotations

NOTHING_TO_UNDO = "Nothing to undo"


class BridgeError(Exception):
    """Base class for failures surfaced to tool callers."""


class NotConnectedError(BridgeError):
    """No live worker channel at dispatch time."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Design worker not connected. Open the document editor and start the worker."
        )


class UnknownCommandError(BridgeError):
    """No handler is registered under the requested name."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Unknown command: {command}")


class RequestTimeoutError(BridgeError):
    """No reply arrived within the request timeout."""

    def __init__(self, command: str, timeout: float) -> None:
        self.command = command
        self.timeout = timeout
        super().__init__(f"Request timed out after {timeout:g}s: {command}")


class HandlerError(BridgeError):
    """A command handler raised; carries the handler's message."""


class InvalidParamsError(HandlerError):
    """Command params failed validation before the handler ran."""

    def __init__(self, command: str, problems: list[str]) -> None:
        self.command = command
        self.problems = problems
        super().__init__(f"Invalid params for {command}: {'; '.join(problems)}")
