"""Tests for the batch interpreter."""

import logging

import pytest

from designbridge.worker import WorkerSession
from designbridge.worker.batch import BatchInterpreter
from designbridge.worker.registry import CommandRegistry
from designbridge.worker.results import ok


class TestReferences:
    """Results flow between entries through $ref tokens."""

    async def test_created_frame_becomes_parent(self, session: WorkerSession) -> None:
        report = await session.batch.run(
            [
                {"id": "a", "command": "create_frame", "params": {"name": "F"}},
                {"command": "create_text", "params": {"parentId": "$ref:a.nodeId", "text": "hi"}},
            ]
        )
        frame_id = report.results[0]["nodeId"]
        text = session.document.require(report.results[1]["nodeId"])
        assert text.parent is session.document.require(frame_id)

    async def test_forward_reference_resolves_to_none(self) -> None:
        """An entry sees only results of strictly earlier entries."""
        registry = CommandRegistry()
        seen: list = []

        async def record(params):
            seen.append(params)
            return ok(value=params.get("value"))

        registry.add("record", record)
        await BatchInterpreter(registry).run(
            [
                {"id": "first", "command": "record", "params": {"value": "$ref:second.value"}},
                {"id": "second", "command": "record", "params": {"value": 2}},
            ]
        )
        assert seen[0] == {"value": None}

    async def test_failed_entry_stores_nothing(self) -> None:
        registry = CommandRegistry()
        seen: list = []

        async def explode(params):
            raise RuntimeError("boom")

        async def record(params):
            seen.append(params)
            return ok()

        registry.add("explode", explode)
        registry.add("record", record)
        report = await BatchInterpreter(registry).run(
            [
                {"id": "bad", "command": "explode"},
                {"command": "record", "params": {"error": "$ref:bad.error"}},
            ]
        )
        assert report.results[0] == {"success": False, "error": "boom"}
        assert seen == [{"error": None}]


class TestFailures:
    """Failures are recorded in place and never stop the batch."""

    async def test_unknown_command_in_the_middle(self, session: WorkerSession) -> None:
        report = await session.batch.run(
            [
                {"command": "create_frame", "params": {"name": "A"}},
                {"command": "teleport", "params": {}},
                {"command": "create_frame", "params": {"name": "B"}},
            ]
        )
        result = report.to_result()
        assert result["success"] is True
        assert result["results"][1] == {"success": False, "error": "Unknown command: teleport"}
        assert result["executedCount"] == 3
        assert result["successCount"] == 2
        assert [n.name for n in session.document.page.children] == ["A", "B"]

    async def test_handler_exception_becomes_failure(self, session: WorkerSession) -> None:
        report = await session.batch.run([{"command": "delete_node", "params": {"nodeId": "1:99"}}])
        assert report.results == [{"success": False, "error": "Node not found"}]

    async def test_invalid_params_become_failure(self, session: WorkerSession) -> None:
        report = await session.batch.run([{"command": "move_node", "params": {"x": 1}}])
        assert report.results[0]["success"] is False
        assert report.results[0]["error"].startswith("Invalid params for move_node")

    @pytest.mark.parametrize("entry", ["create_frame", {"params": {}}, {"command": 7}])
    async def test_malformed_entries(self, session: WorkerSession, entry) -> None:
        report = await session.batch.run([entry, {"command": "get_selection"}])
        assert report.results[0]["success"] is False
        assert "Invalid batch entry at index 0" in report.results[0]["error"]
        assert report.results[1]["success"] is True

    async def test_partial_failure_is_logged(
        self, session: WorkerSession, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="designbridge"):
            report = await session.batch.run([{"command": "nope"}, {"command": "get_selection"}])
        assert report.partial_failure
        assert "1 of 2" in caplog.text

    async def test_all_success_is_not_partial(self, session: WorkerSession) -> None:
        report = await session.batch.run([{"command": "get_selection"}])
        assert not report.partial_failure


class TestOrdering:
    """Entries run strictly in order."""

    async def test_sequential_side_effects(self, session: WorkerSession) -> None:
        report = await session.batch.run(
            [
                {"id": "f", "command": "create_frame", "params": {"name": "F"}},
                {"command": "move_node", "params": {"nodeId": "$ref:f.nodeId", "x": 10, "y": 10}},
                {"command": "move_node", "params": {"nodeId": "$ref:f.nodeId", "x": 50, "y": 60}},
                {"command": "get_node", "params": {"nodeId": "$ref:f.nodeId"}},
            ]
        )
        assert report.results[3]["node"]["position"] == {"x": 50, "y": 60}

    async def test_batch_via_registry(self, session: WorkerSession) -> None:
        """The batch command itself is reachable through the registry."""
        result = await session.registry.invoke(
            "batch", {"commands": [{"command": "create_rectangle", "params": {}}]}
        )
        assert result["success"] is True
        assert result["results"][0]["type"] == "RECTANGLE"
