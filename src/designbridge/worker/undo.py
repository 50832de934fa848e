"""Single-level undo for bulk edits.

A bulk handler captures each property's previous value on a
:class:`SnapshotRecorder` before overwriting it, then commits the recorder.
The commit replaces whatever the buffer held, so only the latest bulk
operation can be undone, and only once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from designbridge.errors import NOTHING_TO_UNDO
from designbridge.worker.document import Document, Node
from designbridge.worker.results import CommandResult, error_message, failure, ok

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertySnapshot:
    node_id: str
    property: str
    previous_value: Any


@dataclass
class SnapshotRecorder:
    """Collects snapshots for one in-progress bulk operation."""

    document: Document
    entries: list[PropertySnapshot] = field(default_factory=list)

    def capture(self, node: Node, prop: str) -> None:
        """Record the current value of ``prop`` on ``node``."""
        self.entries.append(
            PropertySnapshot(node.id, prop, self.document.get_property(node, prop))
        )


class UndoManager:
    """Holds the undo buffer of one worker session."""

    def __init__(self, document: Document) -> None:
        self.document = document
        self._buffer: list[PropertySnapshot] = []

    @property
    def buffer(self) -> tuple[PropertySnapshot, ...]:
        return tuple(self._buffer)

    @property
    def can_undo(self) -> bool:
        return bool(self._buffer)

    def recorder(self) -> SnapshotRecorder:
        return SnapshotRecorder(self.document)

    def commit(self, recorder: SnapshotRecorder) -> None:
        """Replace the buffer with ``recorder``'s snapshots."""
        self._buffer = list(recorder.entries)
        log.debug("Undo buffer now holds %d snapshot(s)", len(self._buffer))

    def clear(self) -> None:
        self._buffer = []

    def undo(self) -> CommandResult:
        """Restore every recorded value, then empty the buffer.

        Snapshots are replayed in recorded order and each restore is
        independent: a node that no longer exists fails only its own entry.
        """
        if not self._buffer:
            return failure(NOTHING_TO_UNDO)

        entries, self._buffer = self._buffer, []
        results = []
        for snapshot in entries:
            entry: dict[str, Any] = {"nodeId": snapshot.node_id, "property": snapshot.property}
            try:
                node = self.document.require(snapshot.node_id)
                self.document.set_property(node, snapshot.property, snapshot.previous_value)
            except Exception as e:
                entry.update(success=False, error=error_message(e))
            else:
                entry["success"] = True
            results.append(entry)

        restored = sum(1 for entry in results if entry["success"])
        log.info("Undo restored %d of %d value(s)", restored, len(results))
        return ok(
            restoredCount=restored,
            failedCount=len(results) - restored,
            results=results,
        )
