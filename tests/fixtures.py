"""
Shared Test Networks

Explicit, hand-checked networks used across the test modules.
"""

from typing import Dict, List, Sequence, Tuple

from diagstn.contracts.network import DEdge, Observation, Vertex
from diagstn.core.graph import Graph


EdgeSpec = Tuple[int, int, int, int]


def build_graph(
    vertex_count: int,
    edges: Sequence[EdgeSpec],
    reverse_negative_edges: bool = True
) -> Tuple[Graph, List[Vertex]]:
    graph = Graph(reverse_negative_edges=reverse_negative_edges)
    vertices = [Vertex(i) for i in range(vertex_count)]
    for vertex in vertices:
        graph.add_vertex(vertex)
    for start, end, lower, upper in edges:
        result = graph.add_edge(vertices[start], vertices[end], lower, upper)
        assert result.is_success, result.error
    return graph, vertices


def edge(graph: Graph, start: int, end: int) -> DEdge:
    found = graph.edge_by_key((start, end))
    assert found is not None
    return found


# =============================================================================
# CHAIN WITH A BRANCH (two observations from vertex 0)
# =============================================================================

BRANCHED_EDGES: List[EdgeSpec] = [
    (0, 1, 10, 15),
    (1, 2, 14, 23),
    (2, 3, 6, 12),
    (2, 4, 13, 999),
    (3, 5, 25, 33),
    (4, 6, 10, 15),
]


def branched_network() -> Tuple[Graph, List[Vertex], List[Observation]]:
    """
    0 -> 1 -> 2 -> 3 -> 5
                \\-> 4 -> 6

    Observation 0..5 [85,100] against prediction [55,83] -> [17,30]
    Observation 0..6 [66,80] against prediction [47,1052] -> [-972,19]
    """
    graph, v = build_graph(7, BRANCHED_EDGES)
    observations = [
        Observation(v[0], v[5], 85, 100),
        Observation(v[0], v[6], 66, 80),
    ]
    return graph, v, observations


BRANCHED_DIAGNOSES: List[Dict[Tuple[int, int], Tuple[int, int]]] = [
    {(0, 1): (17, 19)},
    {(1, 2): (17, 19)},
    {(2, 3): (17, 30), (2, 4): (-972, 19)},
    {(2, 3): (17, 30), (4, 6): (-972, 19)},
    {(3, 5): (17, 30), (2, 4): (-972, 19)},
    {(3, 5): (17, 30), (4, 6): (-972, 19)},
]


BRANCHED_PROBLEM = {
    "vertices": [{"id": i, "name": str(i)} for i in range(7)],
    "edges": [
        {"start": s, "end": e, "lb": lb, "ub": ub} for s, e, lb, ub in BRANCHED_EDGES
    ],
    "observations": [
        {"start": 0, "end": 5, "lb": 85, "ub": 100},
        {"start": 0, "end": 6, "lb": 66, "ub": 80},
    ],
}


# =============================================================================
# DIAMOND BEHIND A SHARED PREFIX (two paths per observation)
# =============================================================================

def diamond_network(c_to_d: Tuple[int, int] = (1, 2)) -> Tuple[Graph, List[Vertex]]:
    """
    0 -[5,5]-> 1 -[1,3]-> 2 -[1,1]-> 4
               1 -[2,4]-> 3 -[c_to_d]-> 4

    With the default c_to_d the two predictions for 0..4 are [7,9] and
    [8,11] (union [7,11], intersection [8,9]).
    """
    return build_graph(5, [
        (0, 1, 5, 5),
        (1, 2, 1, 3),
        (1, 3, 2, 4),
        (2, 4, 1, 1),
        (3, 4, c_to_d[0], c_to_d[1]),
    ])


def as_plain(diagnoses) -> List[Dict[Tuple[int, int], Tuple[int, int]]]:
    return [
        {key: (change.lower, change.upper) for key, change in d.as_mapping().items()}
        for d in diagnoses
    ]
