"""
Path Enumeration
================

Depth-first discovery of every simple path that can explain an observation.

BOUNDARY ENFORCEMENT:
=====================
- Paths never reuse an edge (cyclic networks stay finite)
- An edge into the observation's end vertex is terminal for that observation
- Discovered paths are stored as copies, in discovery order
- Pruning through Graph.ancestors only skips branches that can never reach
  the target; the discovered set is unchanged
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from ..contracts.base import Interval
from ..contracts.network import Observation, Vertex
from ..core.graph import Graph
from ..core.path import GraphPath


class PathIndex:
    """
    Observation -> discovered paths, insertion ordered.

    Observations are registered even when no path explains them, so callers
    can tell "never enumerated" from "no path found".
    """

    def __init__(self):
        self._paths: Dict[Observation, List[GraphPath]] = {}

    def register(self, observation: Observation):
        self._paths.setdefault(observation, [])

    def add(self, observation: Observation, path: GraphPath):
        self._paths.setdefault(observation, []).append(path)

    def paths_for(self, observation: Observation) -> List[GraphPath]:
        return list(self._paths.get(observation, []))

    @property
    def observations(self) -> List[Observation]:
        return list(self._paths)

    @property
    def total_paths(self) -> int:
        return sum(len(paths) for paths in self._paths.values())

    def items(self) -> Iterator[Tuple[Observation, List[GraphPath]]]:
        for observation, paths in self._paths.items():
            yield observation, list(paths)

    def __contains__(self, observation: object) -> bool:
        return observation in self._paths

    def __len__(self) -> int:
        return len(self._paths)


def _reachable_ids(graph: Graph, targets: Sequence[Vertex]) -> Set[int]:
    reachable: Set[int] = set()
    for target in targets:
        reachable.add(target.id)
        reachable |= graph.ancestors(target)
    return reachable


def simple_paths(
    graph: Graph,
    start: Vertex,
    end: Vertex,
    prune: bool = True
) -> List[GraphPath]:
    """All simple paths start -> end in depth-first discovery order."""
    if not graph.has_vertex(start) or not graph.has_vertex(end):
        return []

    reachable: Optional[Set[int]] = _reachable_ids(graph, [end]) if prune else None
    found: List[GraphPath] = []
    path = GraphPath(graph.get_vertex(start.id).value)

    def walk():
        for edge in graph.possible_edges(path.last_vertex):
            if edge.end == end:
                if path.uses_edge(edge):
                    continue
                path.add_step(edge, edge.end)
                found.append(path.copy())
                path.remove_last()
            elif not path.uses_edge(edge):
                if reachable is not None and edge.end.id not in reachable:
                    continue
                path.add_step(edge, edge.end)
                walk()
                path.remove_last()

    walk()
    return found


def enumerate_paths(
    graph: Graph,
    observations: Sequence[Observation],
    prune: bool = True
) -> PathIndex:
    """Run simple_paths for every observation, in observation order."""
    index = PathIndex()
    for observation in observations:
        index.register(observation)
        for path in simple_paths(graph, observation.start, observation.end, prune):
            index.add(observation, path)
    return index


# =============================================================================
# SINGLE ORIGIN (fused enumeration + prediction)
# =============================================================================

def single_origin_paths(
    graph: Graph,
    observations: Sequence[Observation],
    start_time: int = 0
) -> Tuple[PathIndex, Dict[GraphPath, Interval]]:
    """
    One walk from the shared start vertex for every observation.

    Running lower/upper sums are carried down the walk, so shared prefixes
    are summed once. A path is recorded for an observation when the step
    enters its end vertex and that vertex was not visited earlier on the
    walk (start excluded), which yields exactly the paths simple_paths
    finds, in the same order.

    Raises ValueError when the observations do not share one start vertex.
    """
    index = PathIndex()
    predictions: Dict[GraphPath, Interval] = {}
    if not observations:
        return index, predictions

    origin = observations[0].start
    if any(o.start != origin for o in observations):
        raise ValueError("Single origin walk needs one shared start vertex")

    by_end: Dict[int, List[Observation]] = {}
    for observation in observations:
        index.register(observation)
        by_end.setdefault(observation.end.id, []).append(observation)

    if not graph.has_vertex(origin):
        return index, predictions

    reachable = _reachable_ids(graph, [o.end for o in observations])
    path = GraphPath(graph.get_vertex(origin.id).value)
    # vertex id -> times entered on the current walk (start excluded)
    entered: Dict[int, int] = {}

    def walk(lower: int, upper: int):
        for edge in graph.possible_edges(path.last_vertex):
            if path.uses_edge(edge) or edge.end.id not in reachable:
                continue
            step_lower = lower + edge.lower_bound
            step_upper = upper + edge.upper_bound
            first_entry = entered.get(edge.end.id, 0) == 0
            path.add_step(edge, edge.end)
            if first_entry:
                for observation in by_end.get(edge.end.id, []):
                    found = path.copy()
                    index.add(observation, found)
                    predictions[found] = Interval(step_lower, step_upper)
            entered[edge.end.id] = entered.get(edge.end.id, 0) + 1
            walk(step_lower, step_upper)
            entered[edge.end.id] -= 1
            path.remove_last()

    walk(start_time, start_time)
    return index, predictions
