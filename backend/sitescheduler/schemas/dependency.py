from typing import Optional

from pydantic import BaseModel, ConfigDict

from sitescheduler.exceptions import SchedulingException
from sitescheduler.models import DependencyEdge


class TaskEdges(BaseModel):
    """Edges touching one task."""
    incoming: list[DependencyEdge] = []  # This task is the successor
    outgoing: list[DependencyEdge] = []  # This task is the predecessor


class EdgeResult(BaseModel):
    """
    Tagged outcome of an edge mutation.

    Either ok with the affected edge, or not ok with the error and its
    kind: "not_found", "invalid_argument", "duplicate" or "circular".
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    edge: Optional[DependencyEdge] = None
    error: Optional[SchedulingException] = None

    @property
    def kind(self) -> Optional[str]:
        return self.error.kind if self.error is not None else None

    @property
    def cycle_path(self) -> list[str]:
        return list(getattr(self.error, "cycle_path", []))

    @classmethod
    def success(cls, edge: DependencyEdge) -> "EdgeResult":
        return cls(ok=True, edge=edge)

    @classmethod
    def failure(cls, error: SchedulingException) -> "EdgeResult":
        return cls(ok=False, error=error)
