"""
Task dependency graph using NetworkX.

This module handles:
- Cycle-safe insertion of typed dependency edges
- Topological ordering of tasks
- Readiness checks against a set of completed tasks
- Critical path (longest estimated path) through the DAG
"""

import uuid
from collections.abc import Iterable

import networkx as nx

from plon.exceptions import CycleDetectedError, GraphHasCycleError
from plon.logging_config import get_logger
from plon.models import Dependency, DependencyType

logger = get_logger(__name__)


class DependencyGraph:
    """
    Directed graph over task IDs whose edges carry a DependencyType.

    Nodes are task IDs; edges go from predecessor -> successor. The graph
    is acyclic after every successful add_dependency() call.

    Not thread-safe: callers sharing one graph must serialize mutations.
    """

    def __init__(self):
        # Multigraph so two tasks can be linked by more than one edge type
        self._graph = nx.MultiDiGraph()

    @classmethod
    def from_dependencies(
        cls,
        dependencies: Iterable[Dependency],
        task_ids: Iterable[uuid.UUID] = (),
    ) -> "DependencyGraph":
        """
        Build a graph from stored dependency records.

        Tasks are registered first (in the given order) so that isolated
        tasks still appear in the ordering. Raises CycleDetectedError on the
        first record that would close a cycle.
        """
        graph = cls()
        for task_id in task_ids:
            graph.add_task(task_id)
        for dependency in dependencies:
            graph.add_dependency(dependency)
        return graph

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def task_ids(self) -> list[uuid.UUID]:
        """Registered task IDs in insertion order."""
        return list(self._graph.nodes)

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_task(self, task_id: uuid.UUID) -> None:
        """Register a task. Calling it again for the same ID is a no-op."""
        if task_id not in self._graph:
            self._graph.add_node(task_id)

    def add_dependency(self, dependency: Dependency) -> None:
        """
        Insert the edge from_task_id -> to_task_id.

        Algorithm:
        1. Register both endpoints (they stay registered even if the edge is rejected)
        2. Add the edge
        3. Topologically sort the whole graph; on failure remove the edge again

        Raises:
            CycleDetectedError: if the edge would create a cycle
        """
        from_id = dependency.from_task_id
        to_id = dependency.to_task_id

        self.add_task(from_id)
        self.add_task(to_id)

        key = self._graph.add_edge(
            from_id,
            to_id,
            dependency_type=dependency.dependency_type,
        )

        if self.has_cycle():
            self._graph.remove_edge(from_id, to_id, key=key)
            logger.warning(f"Cycle detected: {from_id} -> {to_id} rejected")
            raise CycleDetectedError(from_id, to_id)

        logger.debug(
            f"Added dependency {from_id} -> {to_id} "
            f"({dependency.dependency_type.value})"
        )

    def remove_dependency(self, from_task_id: uuid.UUID, to_task_id: uuid.UUID) -> bool:
        """
        Remove one edge from_task_id -> to_task_id, whatever its type.

        Returns True if an edge was removed.
        """
        if not self._graph.has_edge(from_task_id, to_task_id):
            return False

        first_key = next(iter(self._graph[from_task_id][to_task_id]))
        self._graph.remove_edge(from_task_id, to_task_id, key=first_key)
        logger.debug(f"Removed dependency {from_task_id} -> {to_task_id}")
        return True

    # =========================================================================
    # Ordering
    # =========================================================================

    def has_cycle(self) -> bool:
        return not nx.is_directed_acyclic_graph(self._graph)

    def would_create_cycle(self, from_task_id: uuid.UUID, to_task_id: uuid.UUID) -> bool:
        """
        Check whether adding from_task_id -> to_task_id would create a cycle.

        The graph is not modified. A new edge closes a cycle exactly when
        its source is already reachable from its target.
        """
        if from_task_id == to_task_id:
            return True
        if from_task_id not in self._graph or to_task_id not in self._graph:
            return False
        return nx.has_path(self._graph, to_task_id, from_task_id)

    def topological_sort(self) -> list[uuid.UUID]:
        """
        Order tasks so that for every edge (u, v), u comes before v.

        Raises:
            GraphHasCycleError: if no such ordering exists
        """
        try:
            return list(nx.topological_sort(self._graph))
        except nx.NetworkXUnfeasible:
            raise GraphHasCycleError()

    # =========================================================================
    # Neighbourhood queries
    # =========================================================================

    def get_dependencies(self, task_id: uuid.UUID) -> list[tuple[uuid.UUID, DependencyType]]:
        """Direct predecessors (incoming edges) with their edge type."""
        if task_id not in self._graph:
            return []
        return [
            (source, data["dependency_type"])
            for source, _, data in self._graph.in_edges(task_id, data=True)
        ]

    def get_dependents(self, task_id: uuid.UUID) -> list[tuple[uuid.UUID, DependencyType]]:
        """Direct successors (outgoing edges) with their edge type."""
        if task_id not in self._graph:
            return []
        return [
            (target, data["dependency_type"])
            for _, target, data in self._graph.out_edges(task_id, data=True)
        ]

    def get_descendants(self, task_id: uuid.UUID) -> set[uuid.UUID]:
        """All tasks downstream of task_id."""
        if task_id not in self._graph:
            return set()
        return nx.descendants(self._graph, task_id)

    def get_ancestors(self, task_id: uuid.UUID) -> set[uuid.UUID]:
        """All tasks upstream of task_id."""
        if task_id not in self._graph:
            return set()
        return nx.ancestors(self._graph, task_id)

    def get_all_dependencies(self) -> list[Dependency]:
        """
        Rebuild a Dependency record for every edge.

        The graph does not store record identity, so each call returns
        new IDs and current timestamps. Use the store of record when
        stable IDs matter.
        """
        return [
            Dependency(
                from_task_id=source,
                to_task_id=target,
                dependency_type=data["dependency_type"],
            )
            for source, target, data in self._graph.edges(data=True)
        ]

    # =========================================================================
    # Readiness
    # =========================================================================

    def can_start_task(self, task_id: uuid.UUID, completed_tasks: set[uuid.UUID]) -> bool:
        """
        True unless a FINISH_TO_START predecessor is still incomplete.

        Other dependency types do not gate readiness.
        """
        for dep_task_id, dep_type in self.get_dependencies(task_id):
            if dep_type == DependencyType.FINISH_TO_START and dep_task_id not in completed_tasks:
                return False
        return True

    def get_unblocked_dependents(
        self,
        completed_task_id: uuid.UUID,
        completed_tasks: set[uuid.UUID],
    ) -> list[uuid.UUID]:
        """
        Direct dependents that can start once completed_task_id is done.

        completed_task_id is treated as completed whether or not it is
        already in completed_tasks. Each dependent is listed once.
        """
        done = set(completed_tasks) | {completed_task_id}
        unblocked = []
        for dependent_id, _ in self.get_dependents(completed_task_id):
            if dependent_id in unblocked:
                continue
            if self.can_start_task(dependent_id, done):
                unblocked.append(dependent_id)
        return unblocked

    # =========================================================================
    # Critical path
    # =========================================================================

    def get_critical_path(self, task_estimates: dict[uuid.UUID, float]) -> list[uuid.UUID]:
        """
        Longest estimated path through the DAG, in chronological order.

        distance[v] = max over predecessors p of (distance[p] + estimate[p]).
        Missing estimates count as 0. The path ends at the task maximizing
        distance + estimate and is traced back through the predecessor that
        achieved each maximum (first one wins on ties).

        Returns an empty list for an empty or cyclic graph.
        """
        try:
            sorted_tasks = self.topological_sort()
        except GraphHasCycleError:
            return []

        if not sorted_tasks:
            return []

        distances: dict[uuid.UUID, float] = {}
        predecessors: dict[uuid.UUID, uuid.UUID | None] = {}

        def finish(task_id: uuid.UUID) -> float:
            return distances.get(task_id, 0.0) + task_estimates.get(task_id, 0.0)

        for task_id in sorted_tasks:
            best_pred = None
            best_distance = 0.0
            for pred_id, _ in self.get_dependencies(task_id):
                candidate = finish(pred_id)
                # Strict ">" keeps the earliest predecessor on ties
                if best_pred is None or candidate > best_distance:
                    best_pred = pred_id
                    best_distance = candidate
            distances[task_id] = best_distance
            predecessors[task_id] = best_pred

        # max() returns the first maximal task in topological order
        end_task = max(sorted_tasks, key=finish)

        path = []
        current = end_task
        while current is not None:
            path.append(current)
            current = predecessors.get(current)
        path.reverse()
        return path
