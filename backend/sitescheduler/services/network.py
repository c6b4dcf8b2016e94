"""
Graph traversal primitives for the scheduling engine.

Task IDs are interned to dense integer indices once per run; every pass
afterwards works on list positions instead of hashing string IDs.

This module handles:
- Snapshot validation and interning
- Downstream set for cascade scheduling
- Topological sort (Kahn's algorithm) with cycle reporting
"""

import heapq
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Union

import networkx as nx
from pydantic import ValidationError

from sitescheduler.exceptions import InvalidSnapshotError, NotFoundError, validation_details
from sitescheduler.logging_config import get_logger
from sitescheduler.models import DependencyEdge, Task

logger = get_logger(__name__)

TaskInput = Union[Task, Mapping[str, Any]]
EdgeInput = Union[DependencyEdge, Mapping[str, Any]]


@dataclass
class TaskNode:
    """Working state of one task during a scheduling run."""
    index: int
    task: Task
    span: int  # Days occupied on the calendar, at least 1
    fixed: bool  # Dates pinned by in-progress/completed work
    in_scope: bool = True
    # Forward pass results
    es: Optional[date] = None
    ef: Optional[date] = None
    # Backward pass results
    ls: Optional[date] = None
    lf: Optional[date] = None
    # (edge, predecessor index) / (edge, successor index)
    incoming: list[tuple[DependencyEdge, int]] = field(default_factory=list)
    outgoing: list[tuple[DependencyEdge, int]] = field(default_factory=list)

    @property
    def task_id(self) -> str:
        return self.task.id

    @property
    def total_float(self) -> int:
        return (self.ls - self.es).days


@dataclass
class Snapshot:
    """Tasks and edges interned to dense integer indices."""
    nodes: list[TaskNode]
    index_of: dict[str, int]
    edges: list[DependencyEdge]
    graph: nx.DiGraph  # Over node indices

    def node(self, task_id: str) -> TaskNode:
        return self.nodes[self.index_of[task_id]]


def build_snapshot(
    tasks: Iterable[TaskInput],
    edges: Iterable[EdgeInput],
) -> Snapshot:
    """
    Validate the caller's records and intern them.

    Raises InvalidSnapshotError for duplicate task IDs, self-edges or edges
    referencing tasks that are not in the snapshot. Those are contract
    violations by the caller, not graph states to degrade gracefully on.
    So is a record that fails model validation (unknown dependency type,
    non-integer lag, negative duration).
    """
    nodes: list[TaskNode] = []
    index_of: dict[str, int] = {}

    for raw in tasks:
        task = raw if isinstance(raw, Task) else _validate(Task, raw, "task")
        if task.id in index_of:
            raise InvalidSnapshotError(f"Task {task.id} appears more than once in the snapshot")
        index_of[task.id] = len(nodes)
        nodes.append(TaskNode(
            index=len(nodes),
            task=task,
            span=max(task.effective_duration or 0, 1),
            fixed=task.is_underway,
        ))

    graph = nx.DiGraph()
    graph.add_nodes_from(range(len(nodes)))
    edge_list: list[DependencyEdge] = []
    seen: set[tuple[str, str]] = set()

    for raw in edges:
        edge = raw if isinstance(raw, DependencyEdge) else _validate(DependencyEdge, raw, "dependency")
        missing = [
            task_id
            for task_id in (edge.predecessor_id, edge.successor_id)
            if task_id not in index_of
        ]
        if missing:
            raise InvalidSnapshotError(
                f"Dependency {edge.predecessor_id} -> {edge.successor_id} "
                f"references unknown task(s): {', '.join(missing)}",
                details=[{
                    "loc": ["edges", edge.predecessor_id, edge.successor_id],
                    "msg": f"Unknown task ID {task_id}",
                    "type": "unknown_task",
                } for task_id in missing],
            )
        if edge.predecessor_id == edge.successor_id:
            raise InvalidSnapshotError(f"Task {edge.predecessor_id} depends on itself")
        if edge.key in seen:
            logger.warning(
                f"Ignoring duplicate dependency in snapshot: "
                f"{edge.predecessor_id} -> {edge.successor_id}"
            )
            continue
        seen.add(edge.key)

        pred = index_of[edge.predecessor_id]
        succ = index_of[edge.successor_id]
        nodes[succ].incoming.append((edge, pred))
        nodes[pred].outgoing.append((edge, succ))
        graph.add_edge(pred, succ)
        edge_list.append(edge)

    return Snapshot(nodes=nodes, index_of=index_of, edges=edge_list, graph=graph)


def _validate(model, raw, label: str):
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise InvalidSnapshotError(
            f"Malformed {label} record in snapshot",
            details=validation_details(exc),
        ) from exc


def downstream_of(snapshot: Snapshot, anchor_id: str) -> set[int]:
    """Anchor plus every task reachable from it along successor edges."""
    if anchor_id not in snapshot.index_of:
        raise NotFoundError("Anchor task", anchor_id)

    start = snapshot.index_of[anchor_id]
    return nx.descendants(snapshot.graph, start) | {start}


def topological_order(snapshot: Snapshot, scope: set[int]) -> tuple[list[int], list[str]]:
    """
    Kahn's algorithm over the tasks in scope.

    Ready tasks are taken in task ID order so the output is deterministic.

    Returns (order, cycle_nodes). cycle_nodes is empty for a DAG; otherwise
    it lists, sorted, every task left unordered once the queue empties:
    the cycle members and the tasks stuck behind them.
    """
    nodes = snapshot.nodes
    graph = snapshot.graph.subgraph(scope)
    in_degree = dict(graph.in_degree())

    ready = [(nodes[idx].task_id, idx) for idx, degree in in_degree.items() if degree == 0]
    heapq.heapify(ready)

    order: list[int] = []
    while ready:
        _, idx = heapq.heappop(ready)
        order.append(idx)
        for succ in graph.successors(idx):
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                heapq.heappush(ready, (nodes[succ].task_id, succ))

    if len(order) == len(scope):
        return order, []

    cycle_nodes = sorted(nodes[idx].task_id for idx in scope.difference(order))
    return order, cycle_nodes
