from sitescheduler.models.task import Task, TaskStatus
from sitescheduler.models.dependency import DependencyEdge, DependencyType

__all__ = [
    "Task",
    "TaskStatus",
    "DependencyEdge",
    "DependencyType",
]
