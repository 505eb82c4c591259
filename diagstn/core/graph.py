"""
Temporal Network Graph
======================

Static structure of a Simple Temporal Network: vertices, directed edges with
[lower, upper] bounds and the adjacency index used by path enumeration.

BOUNDARY ENFORCEMENT:
=====================
- An edge is only added when both endpoints are already part of the graph
- At most one edge per ordered vertex pair
- Rejections are returned as Result failures and recorded in the graph's
  DiagnosticLog; nothing is silently dropped
- No diagnosis state is stored here (see analysis.context)

A networkx DiGraph mirrors the structure for purely topological questions
(reachability, density, acyclicity).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Set
import networkx as nx

from ..contracts.base import Error, ErrorCode, Result
from ..contracts.network import DEdge, EdgeKey, Vertex
from ..observability import DiagnosticLog


@dataclass(frozen=True)
class GraphMetrics:
    """Immutable structural metrics for a network."""
    vertex_count: int
    edge_count: int
    density: float
    is_acyclic: bool
    weak_components: int


class Graph:
    """
    Simple Temporal Network.

    Vertices and edges keep insertion order, so path enumeration and every
    result derived from it is deterministic.
    """

    def __init__(
        self,
        reverse_negative_edges: bool = True,
        log: Optional[DiagnosticLog] = None
    ):
        self._vertices: Dict[int, Vertex] = {}
        self._edges: Dict[EdgeKey, DEdge] = {}
        self._outgoing: Dict[int, Dict[EdgeKey, DEdge]] = {}
        self._incoming: Dict[int, Dict[EdgeKey, DEdge]] = {}
        self._topology = nx.DiGraph()
        self.reverse_negative_edges = reverse_negative_edges
        self.log = log or DiagnosticLog("graph")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def add_vertex(self, vertex: Vertex) -> Result:
        if vertex.id in self._vertices:
            error = Error.create(
                ErrorCode.DUPLICATE_VERTEX,
                f"Vertex id {vertex.id} is already part of the network",
                vertex=vertex.id
            )
            self.log.error(error)
            return Result.failure(error)
        self._vertices[vertex.id] = vertex
        self._topology.add_node(vertex.id)
        return Result.success(vertex)

    def add_edge(
        self,
        start: Vertex,
        end: Vertex,
        lower_bound: int,
        upper_bound: int,
        contingent: bool = False
    ) -> Result:
        """
        Create an edge start -> end and add it to the network.

        With reverse_negative_edges set, an edge whose bounds are both
        negative is stored as end -> start with bounds [|ub|, |lb|].
        """
        if not self.has_vertex(start) or not self.has_vertex(end):
            error = Error.create(
                ErrorCode.INVALID_EDGE,
                "Edge cannot be added, one of the vertices is not part of the network",
                start=start.id,
                end=end.id
            )
            self.log.error(error)
            return Result.failure(error)

        if lower_bound > upper_bound:
            error = Error.create(
                ErrorCode.INVALID_BOUNDS,
                f"Incorrect bounds on {start.name}->{end.name}: lb > ub",
                lower=lower_bound,
                upper=upper_bound
            )
            self.log.error(error)
            return Result.failure(error)

        if self.reverse_negative_edges and lower_bound < 0 and upper_bound < 0:
            start, end = end, start
            lower_bound, upper_bound = abs(upper_bound), abs(lower_bound)
            self.log.warning(
                ErrorCode.REVERSED_EDGE,
                f"Negative edge stored as {start.name}->{end.name} "
                f"[{lower_bound},{upper_bound}]",
                start=start.id,
                end=end.id
            )

        # Use the graph's own vertex objects
        start = self._vertices[start.id]
        end = self._vertices[end.id]

        key = (start.id, end.id)
        if key in self._edges:
            error = Error.create(
                ErrorCode.DUPLICATE_EDGE,
                f"An edge {start.name}->{end.name} already exists",
                start=start.id,
                end=end.id
            )
            self.log.error(error)
            return Result.failure(error)

        edge = DEdge(start, end, lower_bound, upper_bound, contingent)
        self._edges[key] = edge
        self._outgoing.setdefault(start.id, {})[key] = edge
        self._incoming.setdefault(end.id, {})[key] = edge
        self._topology.add_edge(start.id, end.id)
        return Result.success(edge)

    def remove_edge(self, edge: DEdge) -> Result:
        stored = self._edges.pop(edge.key, None)
        if stored is None:
            return Result.failure(Error.create(
                ErrorCode.EDGE_NOT_FOUND,
                f"Edge {edge.label} is not part of the network",
                start=edge.start.id,
                end=edge.end.id
            ))
        self._detach(stored)
        return Result.success(stored)

    def remove_vertex(self, vertex: Vertex) -> Result:
        """Remove a vertex together with every edge touching it."""
        if vertex.id not in self._vertices:
            return Result.failure(self._vertex_missing("id", vertex.id))
        touching = list(self._outgoing.get(vertex.id, {}).values())
        touching += list(self._incoming.get(vertex.id, {}).values())
        for edge in touching:
            if self._edges.pop(edge.key, None) is not None:
                self._detach(edge)
        self._outgoing.pop(vertex.id, None)
        self._incoming.pop(vertex.id, None)
        self._topology.remove_node(vertex.id)
        return Result.success(self._vertices.pop(vertex.id))

    def _detach(self, edge: DEdge):
        outgoing = self._outgoing.get(edge.start.id)
        if outgoing is not None:
            outgoing.pop(edge.key, None)
            if not outgoing:
                del self._outgoing[edge.start.id]
        incoming = self._incoming.get(edge.end.id)
        if incoming is not None:
            incoming.pop(edge.key, None)
            if not incoming:
                del self._incoming[edge.end.id]
        if self._topology.has_edge(edge.start.id, edge.end.id):
            self._topology.remove_edge(edge.start.id, edge.end.id)

    def change_edge_bounds(
        self,
        start: Vertex,
        end: Vertex,
        lower_bound: int,
        upper_bound: int
    ) -> Result:
        """
        Change the bounds of an existing edge.
        Only meaningful before observations are analyzed.
        """
        edge = self.get_direct_edge(start, end)
        if edge is None:
            return Result.failure(Error.create(
                ErrorCode.EDGE_NOT_FOUND,
                f"No edge {start.name}->{end.name} to change",
                start=start.id,
                end=end.id
            ))
        if lower_bound > upper_bound:
            return Result.failure(Error.create(
                ErrorCode.INVALID_BOUNDS,
                f"Incorrect bounds on {start.name}->{end.name}: lb > ub",
                lower=lower_bound,
                upper=upper_bound
            ))
        edge.lower_bound = lower_bound
        edge.upper_bound = upper_bound
        return Result.success(edge)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def has_vertex(self, vertex: Vertex) -> bool:
        return vertex.id in self._vertices

    def get_vertex(self, vertex_id: int) -> Result:
        vertex = self._vertices.get(vertex_id)
        if vertex is None:
            return Result.failure(self._vertex_missing("id", vertex_id))
        return Result.success(vertex)

    def get_vertex_by_name(self, name: str) -> Result:
        """First vertex carrying the given display name."""
        for vertex in self._vertices.values():
            if vertex.name == name:
                return Result.success(vertex)
        return Result.failure(self._vertex_missing("name", name))

    def _vertex_missing(self, field_name: str, value: object) -> Error:
        error = Error.create(
            ErrorCode.VERTEX_NOT_FOUND,
            f"Vertex not found, {field_name}: {value}",
            **{field_name: value}
        )
        self.log.error(error)
        return error

    def possible_edges(self, vertex: Vertex) -> List[DEdge]:
        """Outgoing edges of a vertex (empty for a dead end)."""
        return list(self._outgoing.get(vertex.id, {}).values())

    def incoming_edges(self, vertex: Vertex) -> List[DEdge]:
        return list(self._incoming.get(vertex.id, {}).values())

    def adjacent_vertices(self, vertex: Vertex) -> List[Vertex]:
        return [e.end for e in self.possible_edges(vertex)]

    def incoming_vertices(self, vertex: Vertex) -> List[Vertex]:
        return [e.start for e in self.incoming_edges(vertex)]

    def out_degree(self, vertex: Vertex) -> int:
        return len(self._outgoing.get(vertex.id, {}))

    def in_degree(self, vertex: Vertex) -> int:
        return len(self._incoming.get(vertex.id, {}))

    def get_direct_edge(self, start: Vertex, end: Vertex) -> Optional[DEdge]:
        return self._edges.get((start.id, end.id))

    def direct_reach(self, start: Vertex, end: Vertex) -> bool:
        return (start.id, end.id) in self._edges

    def edge_by_key(self, key: EdgeKey) -> Optional[DEdge]:
        return self._edges.get(key)

    @property
    def vertices(self) -> List[Vertex]:
        return list(self._vertices.values())

    @property
    def edges(self) -> List[DEdge]:
        return list(self._edges.values())

    def __len__(self) -> int:
        return len(self._vertices)

    # -------------------------------------------------------------------------
    # Topology (networkx)
    # -------------------------------------------------------------------------

    def can_reach(self, start: Vertex, end: Vertex) -> bool:
        if start.id not in self._topology or end.id not in self._topology:
            return False
        return nx.has_path(self._topology, start.id, end.id)

    def ancestors(self, vertex: Vertex) -> Set[int]:
        """Ids of every vertex with a directed path to the given vertex."""
        if vertex.id not in self._topology:
            return set()
        return set(nx.ancestors(self._topology, vertex.id))

    def metrics(self) -> GraphMetrics:
        if not self._topology:
            return GraphMetrics(0, 0, 0.0, True, 0)
        return GraphMetrics(
            vertex_count=self._topology.number_of_nodes(),
            edge_count=self._topology.number_of_edges(),
            density=nx.density(self._topology),
            is_acyclic=nx.is_directed_acyclic_graph(self._topology),
            weak_components=nx.number_weakly_connected_components(self._topology)
        )

    # -------------------------------------------------------------------------
    # Copy
    # -------------------------------------------------------------------------

    def copy(self) -> Graph:
        """Deep copy keeping ids, names, bounds and contingent flags."""
        clone = Graph(reverse_negative_edges=False)
        for vertex in self._vertices.values():
            clone.add_vertex(Vertex(vertex.id, vertex.name))
        for edge in self._edges.values():
            clone.add_edge(
                edge.start, edge.end,
                edge.lower_bound, edge.upper_bound,
                edge.contingent
            )
        clone.reverse_negative_edges = self.reverse_negative_edges
        return clone
