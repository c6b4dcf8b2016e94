"""
Tests for applying a previewed schedule: only changed tasks are written,
and a failed write does not undo the others.
"""

from datetime import date

import pytest

from sitescheduler.services.engine import schedule
from sitescheduler.models import DependencyType
from sitescheduler.services.recalc import apply_schedule, milestone_edges, reschedule


class FakeStore:
    """Records writes; can be told to fail for specific tasks."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.writes = {}

    def __call__(self, task_id, start_date, end_date):
        if task_id in self.fail_for:
            raise RuntimeError(f"write failed for {task_id}")
        self.writes[task_id] = (start_date, end_date)


class TestApplySchedule:

    @pytest.fixture
    def preview(self, make_task, make_edge, today):
        """
        A already sits at its computed dates (Jan 1-5).
        B and C need to move.
        """
        tasks = [
            make_task("A", 5, start_date=date(2024, 1, 1), end_date=date(2024, 1, 5)),
            make_task("B", 3, start_date=date(2024, 1, 2), end_date=date(2024, 1, 4)),
            make_task("C", 1),
        ]
        edges = [make_edge("A", "B"), make_edge("B", "C")]
        return schedule(tasks, edges, today)

    def test_only_changed_tasks_are_written(self, preview):
        store = FakeStore()

        report = apply_schedule(preview, store)

        assert report.ok
        assert sorted(report.applied) == ["B", "C"]
        assert report.skipped == 1
        assert store.writes == {
            "B": (date(2024, 1, 6), date(2024, 1, 8)),
            "C": (date(2024, 1, 9), date(2024, 1, 9)),
        }

    def test_partial_failure_keeps_earlier_writes(self, preview):
        store = FakeStore(fail_for={"B"})

        report = apply_schedule(preview, store)

        assert not report.ok
        assert report.applied == ["C"]
        assert "write failed for B" in report.failed["B"]
        # Nothing is rolled back
        assert "C" in store.writes

    def test_cycle_writes_nothing(self, make_task, make_edge, today):
        tasks = [make_task("A"), make_task("B")]
        edges = [make_edge("A", "B"), make_edge("B", "A")]
        store = FakeStore()

        report = apply_schedule(schedule(tasks, edges, today), store)

        assert report.applied == []
        assert store.writes == {}

    def test_preview_does_not_touch_inputs(self, make_task, make_edge, today):
        tasks = [make_task("A", 2), make_task("B", 2)]
        before = [task.model_copy() for task in tasks]

        schedule(tasks, [make_edge("A", "B")], today)

        assert tasks == before


class TestReschedule:

    def test_preview_and_apply_in_one_call(self, make_task, make_edge, today):
        store = FakeStore()
        tasks = [make_task("A", 2), make_task("B", 1)]

        result, report = reschedule(tasks, [make_edge("A", "B")], today, store)

        assert result.critical_path == ["A", "B"]
        assert store.writes["B"] == (date(2024, 1, 3), date(2024, 1, 3))
        assert sorted(report.applied) == ["A", "B"]

    def test_cascade(self, make_task, make_edge, today):
        store = FakeStore()
        tasks = [make_task("A", 2), make_task("B", 1), make_task("C", 1)]
        edges = [make_edge("A", "B")]

        reschedule(tasks, edges, today, store, mode="cascade", anchor_task_id="B")

        # A has no stored dates and is upstream: only B is written
        assert set(store.writes) == {"B"}
        assert store.writes["B"] == (today, today)

    def test_milestone_dependency_waits_for_every_contributor(self, make_task, today):
        """A (2 days) and B (3 days) feed milestone M1; C waits for M1."""
        store = FakeStore()
        tasks = [make_task("A", 2), make_task("B", 3), make_task("C", 1)]

        result, _ = reschedule(
            tasks, [], today, store,
            milestone_deps=[("C", "M1")],
            milestone_links=[("M1", "A"), ("M1", "B")],
        )

        assert store.writes["C"] == (date(2024, 1, 4), date(2024, 1, 4))
        assert result.critical_path == ["B", "C"]


class TestMilestoneEdges:

    def test_one_edge_per_contributor(self):
        edges = milestone_edges(
            milestone_deps=[("C", 1), ("D", 1)],
            milestone_links=[(1, "A"), (1, "B"), (2, "E")],
        )

        assert [edge.key for edge in edges] == [("A", "C"), ("B", "C"), ("A", "D"), ("B", "D")]
        assert all(edge.dependency_type == DependencyType.FINISH_TO_START for edge in edges)
        assert all(edge.lead_lag_days == 0 for edge in edges)

    def test_contributor_waiting_on_its_own_milestone_gets_no_self_edge(self):
        edges = milestone_edges(
            milestone_deps=[("A", "M1")],
            milestone_links=[("M1", "A"), ("M1", "B")],
        )

        assert [edge.key for edge in edges] == [("B", "A")]

    def test_milestone_without_contributors(self):
        assert milestone_edges([("A", "M1")], []) == []
