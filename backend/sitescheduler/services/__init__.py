from sitescheduler.services.graph import DependencyGraph
from sitescheduler.services.engine import schedule
from sitescheduler.services.recalc import (
    ApplyReport,
    apply_schedule,
    milestone_edges,
    reschedule,
)

__all__ = [
    "DependencyGraph",
    "schedule",
    "ApplyReport",
    "apply_schedule",
    "milestone_edges",
    "reschedule",
]
