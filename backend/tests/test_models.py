from datetime import date

import pytest
from pydantic import ValidationError

from sitescheduler.models import DependencyEdge, DependencyType, Task, TaskStatus


class TestTask:

    def test_duration_from_stored_dates_is_inclusive(self):
        task = Task(id="A", start_date=date(2024, 1, 1), end_date=date(2024, 1, 3))
        assert task.effective_duration == 3

    def test_explicit_duration_wins(self):
        task = Task(id="A", duration_days=7, start_date=date(2024, 1, 1), end_date=date(2024, 1, 3))
        assert task.effective_duration == 7

    def test_unknown_duration(self):
        assert Task(id="A", start_date=date(2024, 1, 1)).effective_duration is None

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            Task(id="A", duration_days=-1)

    def test_actual_dates_override_stored_dates(self):
        task = Task(
            id="A",
            status=TaskStatus.IN_PROGRESS,
            start_date=date(2024, 1, 1),
            actual_start_date=date(2024, 1, 4),
        )
        assert task.anchor_start == date(2024, 1, 4)
        assert task.anchor_end is None
        assert task.is_underway

    @pytest.mark.parametrize("status", ["not_started", "blocked"])
    def test_not_underway_without_actual_start(self, status):
        task = Task(id="A", status=status, start_date=date(2024, 1, 1))
        assert not task.is_underway

    def test_camel_case_aliases(self):
        task = Task.model_validate({
            "id": "A",
            "status": "completed",
            "actualStartDate": "2024-01-02",
            "actualEndDate": "2024-01-05",
            "startAfter": "2024-01-01",
        })
        assert task.actual_end_date == date(2024, 1, 5)
        assert task.start_after == date(2024, 1, 1)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Task(id="A", status="paused")


class TestDependencyEdge:

    def test_defaults(self):
        edge = DependencyEdge(predecessor_id="A", successor_id="B")
        assert edge.dependency_type == DependencyType.FINISH_TO_START
        assert edge.lead_lag_days == 0
        assert edge.key == ("A", "B")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            DependencyEdge(predecessor_id="A", successor_id="B", dependency_type="start_to_middle")

    def test_frozen(self):
        edge = DependencyEdge(predecessor_id="A", successor_id="B")
        with pytest.raises(ValidationError):
            edge.lead_lag_days = 3
