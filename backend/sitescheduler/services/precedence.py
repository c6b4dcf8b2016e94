"""
Date rules for the four dependency types.

End dates are inclusive: a task with span N occupies start .. start + N - 1.
lag is lead_lag_days (positive delays the successor, negative lets it overlap).

Forward (earliest start of the successor, span = successor span):
- FS: Pred.End + lag + 1
- SS: Pred.Start + lag
- FF: Pred.End + lag - span + 1    (Succ.End >= Pred.End + lag)
- SF: Pred.Start + lag - span + 1  (Succ.End >= Pred.Start + lag)

Backward (latest finish of the predecessor, span = predecessor span):
- FS: Succ.LS - lag - 1
- SS: Succ.LS - lag + span - 1     (Pred.LS <= Succ.LS - lag)
- FF: Succ.LF - lag
- SF: Succ.LF - lag + span - 1     (Pred.LS <= Succ.LF - lag)
"""

from datetime import date, timedelta
from typing import TYPE_CHECKING

from sitescheduler.models import DependencyEdge, DependencyType

if TYPE_CHECKING:
    from sitescheduler.services.network import TaskNode


def forward_bound(edge: DependencyEdge, pred: "TaskNode", successor_span: int) -> date:
    """Earliest start that one dependency imposes on its successor."""
    lag = edge.lead_lag_days

    if edge.dependency_type == DependencyType.FINISH_TO_START:
        return pred.ef + timedelta(days=lag + 1)
    elif edge.dependency_type == DependencyType.START_TO_START:
        return pred.es + timedelta(days=lag)
    elif edge.dependency_type == DependencyType.FINISH_TO_FINISH:
        return pred.ef + timedelta(days=lag - successor_span + 1)
    elif edge.dependency_type == DependencyType.START_TO_FINISH:
        return pred.es + timedelta(days=lag - successor_span + 1)

    raise ValueError(f"Unhandled dependency type: {edge.dependency_type}")


def backward_limit(edge: DependencyEdge, succ: "TaskNode", predecessor_span: int) -> date:
    """Latest finish that one dependency allows its predecessor."""
    lag = edge.lead_lag_days

    if edge.dependency_type == DependencyType.FINISH_TO_START:
        return succ.ls - timedelta(days=lag + 1)
    elif edge.dependency_type == DependencyType.START_TO_START:
        return succ.ls + timedelta(days=predecessor_span - 1 - lag)
    elif edge.dependency_type == DependencyType.FINISH_TO_FINISH:
        return succ.lf - timedelta(days=lag)
    elif edge.dependency_type == DependencyType.START_TO_FINISH:
        return succ.lf + timedelta(days=predecessor_span - 1 - lag)

    raise ValueError(f"Unhandled dependency type: {edge.dependency_type}")
