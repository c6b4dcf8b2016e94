"""
sitescheduler - dependency graph and critical-path scheduling for construction projects.
"""

from sitescheduler.exceptions import (
    ConflictError,
    CycleDetectedError,
    DuplicateDependencyError,
    InvalidArgumentError,
    InvalidSnapshotError,
    NotFoundError,
    SchedulingException,
    SelfDependencyError,
)
from sitescheduler.models import DependencyEdge, DependencyType, Task, TaskStatus
from sitescheduler.schemas import EdgeResult, ScheduleResult, ScheduledItem, TaskEdges
from sitescheduler.services import (
    ApplyReport,
    DependencyGraph,
    apply_schedule,
    milestone_edges,
    reschedule,
    schedule,
)

__version__ = "0.1.0"

__all__ = [
    "ConflictError",
    "CycleDetectedError",
    "DuplicateDependencyError",
    "InvalidArgumentError",
    "InvalidSnapshotError",
    "NotFoundError",
    "SchedulingException",
    "SelfDependencyError",
    "DependencyEdge",
    "DependencyType",
    "Task",
    "TaskStatus",
    "EdgeResult",
    "ScheduleResult",
    "ScheduledItem",
    "TaskEdges",
    "ApplyReport",
    "DependencyGraph",
    "apply_schedule",
    "milestone_edges",
    "reschedule",
    "schedule",
]
