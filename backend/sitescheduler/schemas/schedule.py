import enum
from datetime import date

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ScheduleMode(str, enum.Enum):
    FULL = "full"  # Every task in the snapshot
    CASCADE = "cascade"  # Anchor task plus everything downstream of it


class WarningType(str, enum.Enum):
    NO_DURATION = "no_duration"
    START_BEFORE_VIOLATED = "start_before_violated"
    ALREADY_COMPLETED = "already_completed"


class ScheduleWarning(BaseModel):
    """A non-fatal observation about one task's computed dates."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task_id: str
    type: WarningType
    message: str


class ScheduledItem(BaseModel):
    """
    Computed dates for one task, next to the dates it had before.

    The previous_* fields let the caller diff what changed before
    applying anything.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task_id: str
    scheduled_start_date: date | None
    scheduled_end_date: date | None
    previous_start_date: date | None
    previous_end_date: date | None
    latest_start_date: date | None = None
    latest_finish_date: date | None = None
    total_float: int = 0
    is_critical: bool = False

    @property
    def has_changed(self) -> bool:
        return (
            self.scheduled_start_date != self.previous_start_date
            or self.scheduled_end_date != self.previous_end_date
        )


class ScheduleResult(BaseModel):
    """Output of one scheduling run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    scheduled_items: list[ScheduledItem] = []
    critical_path: list[str] = []
    cycle_nodes: list[str] = []
    warnings: list[ScheduleWarning] = []

    @property
    def has_cycle(self) -> bool:
        return bool(self.cycle_nodes)

    @property
    def project_end_date(self) -> date | None:
        ends = [
            item.scheduled_end_date
            for item in self.scheduled_items
            if item.scheduled_end_date is not None
        ]
        return max(ends) if ends else None

    def changed_items(self) -> list[ScheduledItem]:
        """Items whose scheduled dates differ from their previous dates."""
        if self.has_cycle:
            return []
        return [item for item in self.scheduled_items if item.has_changed]
