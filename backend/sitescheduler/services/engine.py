"""
Scheduling engine: forward pass of the Critical Path Method (CPM).

Given a read-only snapshot of tasks, dependency edges and "today", computes
the earliest feasible start/end of every task, then runs the backward pass
and critical path extraction from critical_path.

- When a predecessor's dates change, every downstream task moves with it
- Tasks are visited in topological order (Kahn's algorithm)
- A cyclic snapshot is reported through cycle_nodes, never raised
"""

from datetime import date, timedelta
from typing import Iterable, Optional, Union

from sitescheduler.config import get_settings
from sitescheduler.exceptions import InvalidSnapshotError
from sitescheduler.logging_config import get_logger
from sitescheduler.models import TaskStatus
from sitescheduler.schemas import (
    ScheduleMode,
    ScheduleResult,
    ScheduledItem,
    ScheduleWarning,
    WarningType,
)
from sitescheduler.services.critical_path import backward_pass, critical_chain
from sitescheduler.services.network import (
    EdgeInput,
    Snapshot,
    TaskInput,
    TaskNode,
    build_snapshot,
    downstream_of,
    topological_order,
)
from sitescheduler.services.precedence import forward_bound

logger = get_logger(__name__)


def _coerce_date(value: Union[date, str]) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _pin_out_of_scope(node: TaskNode) -> None:
    """Give an upstream task outside the cascade its recorded dates."""
    start = node.task.anchor_start
    if start is None:
        return
    node.es = start
    node.ef = node.task.anchor_end or start + timedelta(days=node.span - 1)


def forward_pass(
    snapshot: Snapshot,
    order: list[int],
    today: date,
    warnings: Optional[list[ScheduleWarning]] = None,
) -> None:
    """
    Fill in ES/EF for every task in order.

    - Fixed tasks keep their actual (or stored) dates; they still constrain
      their successors, and their span becomes the length of those dates.
    - Everyone else starts at the latest of: every predecessor bound, the
      task's start_after, and today (nothing unstarted is scheduled in the past).
    """
    for idx in order:
        node = snapshot.nodes[idx]
        task = node.task

        if node.fixed:
            es = task.anchor_start
            ef = max(task.anchor_end or es + timedelta(days=node.span - 1), es)
            node.es, node.ef = es, ef
            # Recorded dates define the length, whatever duration_days says
            node.span = (ef - es).days + 1
            if warnings is not None and task.anchor_end is None and task.effective_duration is None:
                warnings.append(_no_duration_warning(task.id))
            continue

        es = today
        for edge, pred_idx in node.incoming:
            pred = snapshot.nodes[pred_idx]
            if not pred.in_scope and pred.es is None:
                _pin_out_of_scope(pred)
            if pred.es is None:
                continue  # Upstream task with no dates at all
            es = max(es, forward_bound(edge, pred, node.span))

        if task.start_after is not None:
            es = max(es, task.start_after)

        node.es = es
        node.ef = es + timedelta(days=node.span - 1)

        if warnings is not None:
            warnings.extend(_warnings_for(node))


def _no_duration_warning(task_id: str) -> ScheduleWarning:
    return ScheduleWarning(
        task_id=task_id,
        type=WarningType.NO_DURATION,
        message="Task has no duration set; scheduled as a single-day task",
    )


def _warnings_for(node: TaskNode) -> list[ScheduleWarning]:
    task = node.task
    found = []

    if task.effective_duration is None:
        found.append(_no_duration_warning(task.id))

    # Infeasible window: the lower bound wins, the violation is reported
    if task.start_before is not None and node.es > task.start_before:
        found.append(ScheduleWarning(
            task_id=task.id,
            type=WarningType.START_BEFORE_VIOLATED,
            message=(
                f"Scheduled start date ({node.es.isoformat()}) exceeds "
                f"start-before constraint ({task.start_before.isoformat()})"
            ),
        ))

    if task.status == TaskStatus.COMPLETED:
        start_moved = task.start_date is not None and node.es != task.start_date
        end_moved = task.end_date is not None and node.ef != task.end_date
        if start_moved or end_moved:
            found.append(ScheduleWarning(
                task_id=task.id,
                type=WarningType.ALREADY_COMPLETED,
                message="Task is already completed; its dates should not be changed by the scheduler",
            ))

    return found


def _unchanged_item(node: TaskNode) -> ScheduledItem:
    return ScheduledItem(
        task_id=node.task_id,
        scheduled_start_date=node.task.start_date,
        scheduled_end_date=node.task.end_date,
        previous_start_date=node.task.start_date,
        previous_end_date=node.task.end_date,
    )


def schedule(
    tasks: Iterable[TaskInput],
    edges: Iterable[EdgeInput],
    today: Union[date, str],
    mode: Union[ScheduleMode, str] = ScheduleMode.FULL,
    anchor_task_id: Optional[str] = None,
) -> ScheduleResult:
    """
    Run the CPM scheduler over a snapshot.

    Pure function: nothing is persisted and the inputs are not modified.
    Calling it twice with the same snapshot and today gives the same result.

    Args:
        tasks: Task records (Task models or dicts, snake_case or camelCase)
        edges: Dependency edge records
        today: Reference date (date or ISO YYYY-MM-DD)
        mode: "full" for every task, "cascade" for the anchor and its descendants
        anchor_task_id: Required in cascade mode

    Returns:
        ScheduleResult with scheduled items, critical path, cycle nodes
        and warnings.

    Raises:
        InvalidSnapshotError: dangling edge, self-edge, duplicate task ID or
            missing anchor in cascade mode
        NotFoundError: cascade anchor is not in the snapshot
    """
    today = _coerce_date(today)
    mode = ScheduleMode(mode)
    snapshot = build_snapshot(tasks, edges)

    if mode == ScheduleMode.CASCADE:
        if not anchor_task_id:
            raise InvalidSnapshotError("anchor_task_id is required in cascade mode")
        scope = downstream_of(snapshot, anchor_task_id)
    else:
        scope = set(range(len(snapshot.nodes)))

    if not scope:
        return ScheduleResult()

    for node in snapshot.nodes:
        node.in_scope = node.index in scope

    logger.debug(
        f"Scheduling {len(scope)} of {len(snapshot.nodes)} tasks "
        f"({len(snapshot.edges)} dependencies, mode={mode.value}, today={today})"
    )

    order, cycle_nodes = topological_order(snapshot, scope)

    if cycle_nodes:
        logger.warning(f"Cycle detected in task graph: {', '.join(cycle_nodes)}")
        return ScheduleResult(
            scheduled_items=[_unchanged_item(snapshot.nodes[idx]) for idx in sorted(scope)],
            critical_path=[],
            cycle_nodes=cycle_nodes,
        )

    warnings: Optional[list[ScheduleWarning]] = [] if get_settings().emit_warnings else None
    forward_pass(snapshot, order, today, warnings)
    backward_pass(snapshot, order)
    critical_path = critical_chain(snapshot, order)

    scheduled_items = []
    for idx in order:
        node = snapshot.nodes[idx]
        total_float = node.total_float
        scheduled_items.append(ScheduledItem(
            task_id=node.task_id,
            scheduled_start_date=node.es,
            scheduled_end_date=node.ef,
            previous_start_date=node.task.start_date,
            previous_end_date=node.task.end_date,
            latest_start_date=node.ls,
            latest_finish_date=node.lf,
            # Negative float means the constraints cannot all be met; still critical
            total_float=max(0, total_float),
            is_critical=total_float <= 0,
        ))

    logger.debug(
        f"Scheduled {len(scheduled_items)} tasks; "
        f"critical path has {len(critical_path)} tasks"
    )

    return ScheduleResult(
        scheduled_items=scheduled_items,
        critical_path=critical_path,
        cycle_nodes=[],
        warnings=warnings or [],
    )
