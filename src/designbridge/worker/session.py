"""Worker session: all mutable state of one worker."""

from __future__ import annotations

from designbridge.worker.batch import BatchInterpreter
from designbridge.worker.dispatcher import Dispatcher
from designbridge.worker.document import Document
from designbridge.worker.handlers import register_all
from designbridge.worker.registry import CommandRegistry
from designbridge.worker.undo import UndoManager


class WorkerSession:
    """One document with its registry, undo buffer and batch interpreter.

    The registry is filled with every built-in handler on construction.
    """

    def __init__(self, document: Document | None = None) -> None:
        self.document = document if document is not None else Document()
        self.undo = UndoManager(self.document)
        self.registry = CommandRegistry()
        self.batch = BatchInterpreter(self.registry)
        self.dispatcher = Dispatcher(self.registry)
        register_all(self)

    async def handle_text(self, raw: str | bytes) -> str | None:
        return await self.dispatcher.handle_text(raw)
