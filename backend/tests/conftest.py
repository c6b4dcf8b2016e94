"""
Pytest configuration and fixtures for scheduler tests.
"""

from datetime import date

import pytest

from sitescheduler.config import get_settings
from sitescheduler.models import DependencyEdge, DependencyType, Task
from sitescheduler.services.graph import DependencyGraph


TODAY = date(2024, 1, 1)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached; make every test read the environment fresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_task():
    """Factory for Task snapshots with sensible defaults."""
    def _make(task_id: str, duration: int | None = 1, **fields) -> Task:
        return Task(id=task_id, duration_days=duration, **fields)
    return _make


@pytest.fixture
def make_edge():
    """Factory for dependency edges (finish-to-start, no lag by default)."""
    def _make(
        predecessor_id: str,
        successor_id: str,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        lead_lag_days: int = 0,
    ) -> DependencyEdge:
        return DependencyEdge(
            predecessor_id=predecessor_id,
            successor_id=successor_id,
            dependency_type=dependency_type,
            lead_lag_days=lead_lag_days,
        )
    return _make


@pytest.fixture
def graph() -> DependencyGraph:
    """Empty graph that knows tasks A through F."""
    return DependencyGraph(task_ids=["A", "B", "C", "D", "E", "F"])
