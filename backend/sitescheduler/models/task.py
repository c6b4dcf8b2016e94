import enum
from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"  # Legacy value, scheduled like not_started


class Task(BaseModel):
    """
    Read-only snapshot of a task as supplied by the host application.

    Key fields:
    - start_date / end_date: the stored (previously computed) schedule
    - actual_start_date / actual_end_date: recorded once work really
      begins/ends; they take precedence over the stored dates as anchors
    - duration_days: whole days (0 = milestone); derived from the stored
      dates when missing
    - start_after / start_before: hard window on the start date
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    status: TaskStatus = TaskStatus.NOT_STARTED
    start_date: date | None = None
    end_date: date | None = None
    actual_start_date: date | None = None
    actual_end_date: date | None = None
    duration_days: int | None = Field(default=None, ge=0)
    start_after: date | None = None
    start_before: date | None = None

    @property
    def effective_duration(self) -> int | None:
        """
        Duration in days, or None when it is unknown.

        Falls back to the inclusive length of the stored schedule:
        a task stored as Jan 1 - Jan 3 lasts 3 days.
        """
        if self.duration_days is not None:
            return self.duration_days
        if self.start_date is not None and self.end_date is not None:
            return max((self.end_date - self.start_date).days + 1, 0)
        return None

    @property
    def anchor_start(self) -> date | None:
        return self.actual_start_date or self.start_date

    @property
    def anchor_end(self) -> date | None:
        return self.actual_end_date or self.end_date

    @property
    def is_underway(self) -> bool:
        """True when the recorded dates pin this task in place."""
        if self.status in (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED):
            return self.anchor_start is not None
        if self.status == TaskStatus.BLOCKED:
            # A blocked task only stays put if work actually began
            return self.actual_start_date is not None
        return False
