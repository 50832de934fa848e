"""Bulk edits, undo and batch execution.

``bulk_modify`` is the only command that records undo snapshots. It never
raises for a bad target: each node gets its own entry in ``results``.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Any

from designbridge.worker.document import (
    CORNER_RADIUS,
    FILLS,
    OPACITY,
    STROKE_WEIGHT,
    STROKES,
    VISIBLE,
    Document,
    solid_paint,
)
from designbridge.worker.params import BatchParams, BulkChanges, BulkModifyParams
from designbridge.worker.results import CommandResult, error_message, ok

if TYPE_CHECKING:
    from designbridge.worker.batch import BatchInterpreter
    from designbridge.worker.registry import CommandRegistry
    from designbridge.worker.undo import UndoManager

log = logging.getLogger(__name__)


def property_values(changes: BulkChanges) -> list[tuple[str, Any]]:
    """Translate requested changes into (property, value) pairs, in apply order."""
    values: list[tuple[str, Any]] = []
    if changes.fill_color is not None:
        values.append((FILLS, [solid_paint(changes.fill_color.model_dump())]))
    if changes.stroke_color is not None:
        values.append((STROKES, [solid_paint(changes.stroke_color.model_dump())]))
    if changes.stroke_weight is not None:
        values.append((STROKE_WEIGHT, changes.stroke_weight))
    if changes.opacity is not None:
        values.append((OPACITY, changes.opacity))
    if changes.corner_radius is not None:
        values.append((CORNER_RADIUS, changes.corner_radius))
    if changes.visible is not None:
        values.append((VISIBLE, changes.visible))
    return values


async def bulk_modify(
    document: Document, undo: UndoManager, params: BulkModifyParams
) -> CommandResult:
    values = property_values(params.changes)
    recorder = undo.recorder()
    results: list[dict[str, Any]] = []

    try:
        for node_id in params.node_ids:
            node = document.find(node_id)
            if node is None:
                results.append({"nodeId": node_id, "success": False, "error": "Node not found"})
                continue

            applied: list[str] = []
            skipped: list[str] = []
            try:
                for prop, value in values:
                    if not document.supports(node, prop):
                        skipped.append(prop)
                        continue
                    recorder.capture(node, prop)
                    document.set_property(node, prop, value)
                    applied.append(prop)
            except Exception as e:
                results.append({"nodeId": node_id, "success": False, "error": error_message(e)})
                continue

            entry: dict[str, Any] = {"nodeId": node_id, "success": True, "applied": applied}
            if skipped:
                entry["skipped"] = skipped
            results.append(entry)
    finally:
        undo.commit(recorder)

    modified = sum(1 for entry in results if entry["success"])
    log.debug("bulk_modify changed %d of %d node(s)", modified, len(results))
    return ok(
        modifiedCount=modified,
        totalCount=len(results),
        undoable=undo.can_undo,
        results=results,
    )


async def undo_last(undo: UndoManager, params: Any = None) -> CommandResult:
    return undo.undo()


async def run_batch(interpreter: BatchInterpreter, params: BatchParams) -> CommandResult:
    report = await interpreter.run(params.commands)
    return report.to_result()


def register(
    registry: CommandRegistry,
    document: Document,
    undo: UndoManager,
    interpreter: BatchInterpreter,
) -> None:
    registry.add("bulk_modify", partial(bulk_modify, document, undo), BulkModifyParams)
    registry.add("undo", partial(undo_last, undo))
    registry.add("batch", partial(run_batch, interpreter), BatchParams)
