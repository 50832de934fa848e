"""Name → handler lookup for worker commands."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from designbridge.errors import InvalidParamsError, UnknownCommandError
from designbridge.worker.results import CommandResult

HandlerFn = Callable[[Any], Awaitable[CommandResult]]


def _describe(error: ValidationError) -> list[str]:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "params"
        problems.append(f"{location}: {item.get('msg', 'invalid')}")
    return problems


@dataclass
class CommandHandler:
    """A named command with optional params model.

    When ``params_model`` is set the raw params are validated into it and the
    handler function receives the model; otherwise it receives the raw dict.
    """

    name: str
    fn: HandlerFn
    params_model: type[BaseModel] | None = None

    async def invoke(self, params: dict[str, Any]) -> CommandResult:
        if self.params_model is None:
            return await self.fn(params)
        try:
            parsed = self.params_model.model_validate(params)
        except ValidationError as e:
            raise InvalidParamsError(self.name, _describe(e)) from e
        return await self.fn(parsed)


class CommandRegistry:
    """Static command table, filled once at worker start-up."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, handler: CommandHandler) -> CommandHandler:
        if handler.name in self._handlers:
            raise ValueError(f"Command already registered: {handler.name}")
        self._handlers[handler.name] = handler
        return handler

    def add(
        self,
        name: str,
        fn: HandlerFn,
        params_model: type[BaseModel] | None = None,
    ) -> CommandHandler:
        return self.register(CommandHandler(name=name, fn=fn, params_model=params_model))

    def get(self, name: str) -> CommandHandler | None:
        return self._handlers.get(name)

    async def invoke(self, name: str, params: dict[str, Any]) -> CommandResult:
        """Run ``name`` with ``params``.

        Raises:
            UnknownCommandError: Nothing is registered under ``name``.
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownCommandError(name)
        return await handler.invoke(params)
