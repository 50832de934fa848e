"""Worker command handlers, grouped by concern."""

from __future__ import annotations

from typing import TYPE_CHECKING

from designbridge.worker.handlers import bulk, edit, export, layout, nodes, query

if TYPE_CHECKING:
    from designbridge.worker.session import WorkerSession


def register_all(session: WorkerSession) -> None:
    """Fill the session's registry with every built-in command."""
    nodes.register(session.registry, session.document)
    edit.register(session.registry, session.document)
    query.register(session.registry, session.document)
    layout.register(session.registry, session.document)
    export.register(session.registry, session.document)
    bulk.register(session.registry, session.document, session.undo, session.batch)


__all__ = ["register_all"]
