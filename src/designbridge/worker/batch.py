"""Sequential batch execution with result references."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from designbridge.worker.refs import resolve_refs
from designbridge.worker.registry import CommandRegistry
from designbridge.worker.results import CommandResult, error_message, failure, is_success

log = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Per-entry results of one batch, in input order."""

    results: list[CommandResult] = field(default_factory=list)

    @property
    def executed_count(self) -> int:
        return len(self.results)

    @property
    def success_count(self) -> int:
        return sum(1 for result in self.results if is_success(result))

    @property
    def partial_failure(self) -> bool:
        return self.success_count < self.executed_count

    def to_result(self) -> CommandResult:
        # The batch itself always succeeds; failures live in the entries.
        return {
            "success": True,
            "results": self.results,
            "executedCount": self.executed_count,
            "successCount": self.success_count,
        }


class BatchInterpreter:
    """Runs command lists one entry at a time against a registry.

    Entries may carry an ``id``; a later entry can then reference that
    entry's result with ``$ref:<id>.<field>``. Failures, including unknown
    command names, are recorded in place and never stop the batch.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        self.registry = registry

    async def run(self, commands: Sequence[Any]) -> BatchReport:
        report = BatchReport()
        results_by_id: dict[str, CommandResult] = {}

        for index, entry in enumerate(commands):
            report.results.append(await self._run_entry(index, entry, results_by_id))

        if report.partial_failure:
            log.warning(
                "Batch finished with %d of %d command(s) failed",
                report.executed_count - report.success_count,
                report.executed_count,
            )
        return report

    async def _run_entry(
        self, index: int, entry: Any, results_by_id: dict[str, CommandResult]
    ) -> CommandResult:
        if not isinstance(entry, dict) or not isinstance(entry.get("command"), str):
            return failure(f"Invalid batch entry at index {index}: expected {{command, params}}")

        name = entry["command"]
        params = resolve_refs(entry.get("params") or {}, results_by_id)
        if not isinstance(params, dict):
            return failure(f"Invalid params for {name}: expected an object")

        handler = self.registry.get(name)
        if handler is None:
            return failure(f"Unknown command: {name}")

        try:
            result = await handler.invoke(params)
        except Exception as e:
            log.debug("Batch entry %d (%s) failed: %s", index, name, e)
            return failure(error_message(e))

        entry_id = entry.get("id")
        if isinstance(entry_id, str) and entry_id:
            results_by_id[entry_id] = result
        return result
