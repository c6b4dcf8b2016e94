from sitescheduler.schemas.dependency import TaskEdges, EdgeResult
from sitescheduler.schemas.schedule import (
    ScheduleMode,
    ScheduleResult,
    ScheduledItem,
    ScheduleWarning,
    WarningType,
)

__all__ = [
    "TaskEdges",
    "EdgeResult",
    "ScheduleMode",
    "ScheduleResult",
    "ScheduledItem",
    "ScheduleWarning",
    "WarningType",
]
