"""
Dependency graph operations using NetworkX.

This module handles:
- Edge insertion with self/duplicate/cycle validation
- Edge removal
- Predecessor/successor lookups for a task

A DependencyGraph is built by the caller for one project from the
persisted edges, used for one mutation and thrown away. Concurrent
mutations of the same project must be serialized by the caller: the
cycle check is a read followed by a write.
"""

from typing import Iterable, Optional

import networkx as nx
from pydantic import ValidationError

from sitescheduler.config import get_settings
from sitescheduler.exceptions import (
    CycleDetectedError,
    DuplicateDependencyError,
    InvalidArgumentError,
    NotFoundError,
    SchedulingException,
    SelfDependencyError,
    validation_details,
)
from sitescheduler.logging_config import get_logger
from sitescheduler.models import DependencyEdge, DependencyType
from sitescheduler.schemas import EdgeResult, TaskEdges

logger = get_logger(__name__)


class DependencyGraph:
    """
    Acyclic precedence graph over the tasks of one project.

    Nodes are task IDs; edges go from predecessor -> successor and carry
    the DependencyEdge record under the "edge" attribute.
    """

    def __init__(
        self,
        task_ids: Iterable[str] = (),
        edges: Iterable[DependencyEdge] = (),
    ):
        self._graph = nx.DiGraph()
        self._graph.add_nodes_from(task_ids)

        # Persisted edges go through the same validation as new ones
        for edge in edges:
            self.add_edge(
                edge.predecessor_id,
                edge.successor_id,
                edge.dependency_type,
                edge.lead_lag_days,
            )

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_edges()

    @property
    def task_ids(self) -> list[str]:
        return list(self._graph.nodes)

    @property
    def edges(self) -> list[DependencyEdge]:
        return [data for _, _, data in self._graph.edges(data="edge")]

    def has_edge(self, predecessor_id: str, successor_id: str) -> bool:
        return self._graph.has_edge(predecessor_id, successor_id)

    # =========================================================================
    # Task universe
    # =========================================================================

    def add_task(self, task_id: str) -> None:
        """Make a task ID known to the graph. Adding a known ID is a no-op."""
        self._graph.add_node(task_id)

    def remove_task(self, task_id: str) -> list[DependencyEdge]:
        """
        Forget a task and every edge touching it.

        Returns the edges that were dropped along with it.
        """
        self._ensure_task(task_id, "Task")
        touching = self.edges_for(task_id)
        self._graph.remove_node(task_id)
        logger.info(
            f"Removed task {task_id} with "
            f"{len(touching.incoming) + len(touching.outgoing)} dependencies"
        )
        return touching.incoming + touching.outgoing

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_edge(
        self,
        predecessor_id: str,
        successor_id: str,
        dependency_type: Optional[DependencyType] = None,
        lead_lag_days: int = 0,
    ) -> DependencyEdge:
        """
        Add a dependency (edge in the task DAG).

        Validation order:
        1. Both tasks exist
        2. No self-dependency
        3. No duplicate of the same ordered pair
        4. No cycle: predecessor must not be reachable from successor

        Raises NotFoundError, SelfDependencyError, DuplicateDependencyError,
        CycleDetectedError, or InvalidArgumentError for a malformed type or lag.
        """
        logger.debug(f"Adding dependency: {predecessor_id} -> {successor_id}")

        self._ensure_task(successor_id, "Successor task")
        self._ensure_task(predecessor_id, "Predecessor task")

        if predecessor_id == successor_id:
            logger.warning(f"Self-dependency rejected: {predecessor_id}")
            raise SelfDependencyError(predecessor_id)

        if self._graph.has_edge(predecessor_id, successor_id):
            logger.warning(f"Duplicate dependency rejected: {predecessor_id} -> {successor_id}")
            raise DuplicateDependencyError(predecessor_id, successor_id)

        cycle_path = self.would_create_cycle(predecessor_id, successor_id)
        if cycle_path is not None:
            logger.warning(
                f"Cycle detected: {predecessor_id} -> {successor_id} "
                f"would close {' -> '.join(cycle_path)}"
            )
            raise CycleDetectedError(predecessor_id, successor_id, cycle_path)

        try:
            edge = DependencyEdge(
                predecessor_id=predecessor_id,
                successor_id=successor_id,
                dependency_type=dependency_type or get_settings().default_dependency_type,
                lead_lag_days=lead_lag_days,
            )
        except ValidationError as exc:
            logger.warning(f"Malformed dependency rejected: {predecessor_id} -> {successor_id}")
            raise InvalidArgumentError(
                f"Invalid dependency {predecessor_id} -> {successor_id}",
                details=validation_details(exc),
            ) from exc

        self._graph.add_edge(predecessor_id, successor_id, edge=edge)

        logger.info(
            f"Created dependency: {predecessor_id} -> {successor_id} "
            f"({edge.dependency_type.value}, lag={edge.lead_lag_days})"
        )
        return edge

    def remove_edge(self, predecessor_id: str, successor_id: str) -> DependencyEdge:
        """
        Delete a dependency.

        Removing an edge cannot create a cycle, so only existence is checked.
        """
        if not self._graph.has_edge(predecessor_id, successor_id):
            raise NotFoundError("Dependency", f"{predecessor_id}/{successor_id}")

        edge = self._graph.edges[predecessor_id, successor_id]["edge"]
        self._graph.remove_edge(predecessor_id, successor_id)

        logger.info(f"Deleted dependency: {predecessor_id} -> {successor_id}")
        return edge

    def try_add_edge(
        self,
        predecessor_id: str,
        successor_id: str,
        dependency_type: Optional[DependencyType] = None,
        lead_lag_days: int = 0,
    ) -> EdgeResult:
        """Like add_edge, but reports failures as an EdgeResult instead of raising."""
        try:
            edge = self.add_edge(predecessor_id, successor_id, dependency_type, lead_lag_days)
        except SchedulingException as exc:
            return EdgeResult.failure(exc)
        return EdgeResult.success(edge)

    def try_remove_edge(self, predecessor_id: str, successor_id: str) -> EdgeResult:
        """Like remove_edge, but reports failures as an EdgeResult instead of raising."""
        try:
            edge = self.remove_edge(predecessor_id, successor_id)
        except SchedulingException as exc:
            return EdgeResult.failure(exc)
        return EdgeResult.success(edge)

    # =========================================================================
    # Queries
    # =========================================================================

    def edges_for(self, task_id: str) -> TaskEdges:
        """
        Get dependencies where the task is successor (incoming) or
        predecessor (outgoing).
        """
        self._ensure_task(task_id, "Task")
        return TaskEdges(
            incoming=[data for _, _, data in self._graph.in_edges(task_id, data="edge")],
            outgoing=[data for _, _, data in self._graph.out_edges(task_id, data="edge")],
        )

    def would_create_cycle(self, predecessor_id: str, successor_id: str) -> Optional[list[str]]:
        """
        Check if adding predecessor -> successor would close a cycle.

        Searches forward from the successor along existing edges. If the
        predecessor is reachable, returns the cycle as
        [successor, ..., predecessor, successor]; otherwise None.
        """
        if predecessor_id not in self._graph or successor_id not in self._graph:
            return None

        try:
            path = nx.shortest_path(self._graph, successor_id, predecessor_id)
        except nx.NetworkXNoPath:
            return None

        # The proposed edge closes the loop back to the successor
        return path + [successor_id]

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def _ensure_task(self, task_id: str, context: str) -> None:
        if task_id not in self._graph:
            raise NotFoundError(context, str(task_id))
