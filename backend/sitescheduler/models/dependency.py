import enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DependencyType(str, enum.Enum):
    """The four precedence relations between a predecessor and a successor."""

    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"


class DependencyEdge(BaseModel):
    """
    A directed edge in the task DAG.

    predecessor_id -> successor_id with the given relation, shifted by
    lead_lag_days (positive = lag/delay, negative = lead/overlap).

    Example: "B starts 2 days after A finishes":
    - predecessor_id = A.id
    - successor_id = B.id
    - dependency_type = finish_to_start
    - lead_lag_days = 2
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lead_lag_days: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.predecessor_id, self.successor_id)
