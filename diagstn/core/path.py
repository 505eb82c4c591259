"""
Graph Paths

An ordered trace v0 -e1-> v1 ... -en-> vn through the network, built
step by step during depth-first search.
"""

from __future__ import annotations
from typing import Iterator, List, Set, Tuple

from ..contracts.base import Interval
from ..contracts.network import DEdge, EdgeKey, Vertex


class GraphPath:
    """
    Path through the network with stack-style growth.

    Invariants:
    - edge i connects vertex i-1 to vertex i
    - no edge appears twice (keeps simple-path search finite on cycles)

    Paths compare by identity; copies are distinct objects that share the
    graph's vertex and edge objects.
    """

    def __init__(self, start: Vertex):
        self._vertices: List[Vertex] = [start]
        self._edges: List[DEdge] = []
        self._edge_keys: Set[EdgeKey] = set()

    def add_step(self, edge: DEdge, vertex: Vertex):
        if edge.start != self._vertices[-1] or edge.end != vertex:
            raise ValueError(
                f"Edge {edge.label} does not continue the path at {self.last_vertex.name}"
            )
        if edge.key in self._edge_keys:
            raise ValueError(f"Edge {edge.label} is already used on this path")
        self._edges.append(edge)
        self._vertices.append(vertex)
        self._edge_keys.add(edge.key)

    def remove_last(self):
        if not self._edges:
            raise IndexError("Cannot remove the start vertex of a path")
        edge = self._edges.pop()
        self._vertices.pop()
        self._edge_keys.discard(edge.key)

    def uses_edge(self, edge: DEdge) -> bool:
        return edge.key in self._edge_keys

    def visits(self, vertex: Vertex) -> bool:
        return vertex in self._vertices

    @property
    def start(self) -> Vertex:
        return self._vertices[0]

    @property
    def last_vertex(self) -> Vertex:
        return self._vertices[-1]

    @property
    def vertices(self) -> Tuple[Vertex, ...]:
        return tuple(self._vertices)

    @property
    def edges(self) -> Tuple[DEdge, ...]:
        return tuple(self._edges)

    @property
    def edge_keys(self) -> Set[EdgeKey]:
        return set(self._edge_keys)

    @property
    def step_size(self) -> int:
        """Number of vertices, start included."""
        return len(self._vertices)

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[DEdge]:
        return iter(self._edges)

    def copy(self) -> GraphPath:
        """Structurally independent copy sharing vertex/edge objects."""
        clone = GraphPath(self._vertices[0])
        clone._vertices = list(self._vertices)
        clone._edges = list(self._edges)
        clone._edge_keys = set(self._edge_keys)
        return clone

    def is_similar(self, other: GraphPath) -> bool:
        """Same sequence of vertex ids."""
        if len(other._vertices) != len(self._vertices):
            return False
        return all(a.id == b.id for a, b in zip(self._vertices, other._vertices))

    def predict(self, start_time: int = 0) -> Interval:
        """Sum of edge bounds along the path, starting from start_time."""
        lower = upper = start_time
        for edge in self._edges:
            lower += edge.lower_bound
            upper += edge.upper_bound
        return Interval(lower, upper)

    def describe(self) -> str:
        """Vertex names joined by the bounds of each step: 0 -[10,15]-> 1."""
        parts = [self._vertices[0].name]
        for edge, vertex in zip(self._edges, self._vertices[1:]):
            parts.append(f" -[{edge.lower_bound},{edge.upper_bound}]-> {vertex.name}")
        return "".join(parts)

    def short(self) -> str:
        return "-".join(v.name for v in self._vertices)

    def __repr__(self) -> str:
        return f"GraphPath({self.short()})"
