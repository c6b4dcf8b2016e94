"""
Apply service: writes a previewed schedule back through the host's store.

The scheduler itself never persists anything. The host runs schedule()
as a preview, then calls apply_schedule() with a persist callback:
- Only tasks whose dates actually changed are written
- Each write is independent: a failed write is logged and reported, and
  writes that already succeeded stay in place (no rollback)
- A cyclic result writes nothing

Milestone dependencies ("task T waits for milestone M") are not edges of
their own: milestone_edges() expands them into finish-to-start edges from
every task contributing to M, and reschedule() feeds those to the engine
next to the real dependencies.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Hashable, Iterable, Optional, Union

from sitescheduler.logging_config import get_logger
from sitescheduler.models import DependencyEdge, DependencyType
from sitescheduler.schemas import ScheduleMode, ScheduleResult
from sitescheduler.services.engine import schedule
from sitescheduler.services.network import EdgeInput, TaskInput

logger = get_logger(__name__)

# persist(task_id, new_start_date, new_end_date)
PersistFn = Callable[[str, Optional[date], Optional[date]], None]


@dataclass
class ApplyReport:
    """Outcome of applying a schedule."""
    applied: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # task_id -> error message
    skipped: int = 0  # Unchanged items

    @property
    def ok(self) -> bool:
        return not self.failed


def apply_schedule(result: ScheduleResult, persist: PersistFn) -> ApplyReport:
    """
    Persist the changed items of a schedule result.

    Args:
        result: Output of schedule()
        persist: Callback that stores one task's new start/end dates

    Returns:
        ApplyReport listing applied and failed task IDs
    """
    report = ApplyReport()

    if result.has_cycle:
        logger.warning(
            f"Not applying schedule: cycle detected ({', '.join(result.cycle_nodes)})"
        )
        return report

    changed = result.changed_items()
    report.skipped = len(result.scheduled_items) - len(changed)

    for item in changed:
        try:
            persist(item.task_id, item.scheduled_start_date, item.scheduled_end_date)
        except Exception as exc:
            logger.exception(f"Failed to apply dates for task {item.task_id}")
            report.failed[item.task_id] = str(exc)
            continue
        report.applied.append(item.task_id)

    if report.failed:
        logger.warning(
            f"Applied {len(report.applied)} of {len(changed)} changed tasks; "
            f"{len(report.failed)} failed"
        )
    else:
        logger.info(f"Applied {len(report.applied)} changed tasks")

    return report


def milestone_edges(
    milestone_deps: Iterable[tuple[str, Hashable]],
    milestone_links: Iterable[tuple[Hashable, str]],
) -> list[DependencyEdge]:
    """
    Expand milestone dependencies into plain task edges.

    Args:
        milestone_deps: (task_id, milestone_id) pairs, the task waits for the milestone
        milestone_links: (milestone_id, task_id) pairs, the task contributes to the milestone

    Returns:
        One finish-to-start edge, no lag, from each contributor to each
        dependent task. A task contributing to the milestone it waits for
        gets no edge to itself.
    """
    contributors: dict[Hashable, list[str]] = defaultdict(list)
    for milestone_id, task_id in milestone_links:
        contributors[milestone_id].append(task_id)

    edges = []
    for task_id, milestone_id in milestone_deps:
        for contributor_id in contributors.get(milestone_id, []):
            if contributor_id == task_id:
                continue
            edges.append(DependencyEdge(
                predecessor_id=contributor_id,
                successor_id=task_id,
                dependency_type=DependencyType.FINISH_TO_START,
                lead_lag_days=0,
            ))

    logger.debug(f"Expanded milestone dependencies into {len(edges)} edges")
    return edges


def reschedule(
    tasks: Iterable[TaskInput],
    edges: Iterable[EdgeInput],
    today: Union[date, str],
    persist: PersistFn,
    mode: Union[ScheduleMode, str] = ScheduleMode.FULL,
    anchor_task_id: Optional[str] = None,
    milestone_deps: Iterable[tuple[str, Hashable]] = (),
    milestone_links: Iterable[tuple[Hashable, str]] = (),
) -> tuple[ScheduleResult, ApplyReport]:
    """
    Preview and apply in one call, e.g. after a dependency was added.

    Milestone dependencies are expanded with milestone_edges() and appended
    after the real edges, so a real edge between the same pair wins.
    """
    all_edges = list(edges) + milestone_edges(milestone_deps, milestone_links)
    result = schedule(tasks, all_edges, today, mode=mode, anchor_task_id=anchor_task_id)
    return result, apply_schedule(result, persist)
