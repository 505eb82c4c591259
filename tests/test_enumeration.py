"""
Path Enumeration Tests

Depth-first discovery of explaining paths, for one observation at a time
and fused over a shared origin.
"""

import pytest

from diagstn.analysis.enumeration import (
    PathIndex, enumerate_paths, simple_paths, single_origin_paths,
)
from diagstn.contracts.base import Interval
from diagstn.contracts.network import Observation, Vertex

from .fixtures import branched_network, build_graph, diamond_network


def shorts(paths):
    return [p.short() for p in paths]


class TestSimplePaths:

    def test_single_path_per_observation(self):
        graph, v, _ = branched_network()
        assert shorts(simple_paths(graph, v[0], v[5])) == ["0-1-2-3-5"]
        assert shorts(simple_paths(graph, v[0], v[6])) == ["0-1-2-4-6"]

    def test_discovery_order_follows_edge_insertion(self):
        graph, v = diamond_network()
        assert shorts(simple_paths(graph, v[0], v[4])) == ["0-1-2-4", "0-1-3-4"]

    def test_cycles_reuse_vertices_not_edges(self):
        graph, v = build_graph(3, [(0, 1, 1, 1), (1, 0, 1, 1), (0, 2, 1, 1), (1, 2, 1, 1)])
        assert shorts(simple_paths(graph, v[0], v[2])) == ["0-1-0-2", "0-1-2", "0-2"]

    def test_edge_into_target_is_terminal(self):
        """Paths stop at the first arrival at the target."""
        graph, v = build_graph(3, [(0, 1, 1, 1), (1, 2, 1, 1), (2, 1, 1, 1)])
        assert shorts(simple_paths(graph, v[0], v[1])) == ["0-1"]

    def test_unreachable_target_and_dead_ends(self):
        graph, v, _ = branched_network()
        assert simple_paths(graph, v[5], v[0]) == []
        assert simple_paths(graph, v[3], v[6]) == []

    def test_unknown_vertex_gives_no_paths(self):
        graph, v, _ = branched_network()
        assert simple_paths(graph, v[0], Vertex(77)) == []

    def test_pruning_does_not_change_result(self):
        graph, v = build_graph(5, [
            (0, 1, 1, 1), (1, 2, 1, 1), (2, 0, 1, 1), (0, 3, 1, 1),
            (3, 4, 1, 1), (4, 3, 1, 1), (1, 3, 1, 1), (2, 4, 1, 1),
        ])
        for target in v:
            pruned = simple_paths(graph, v[0], target, prune=True)
            unpruned = simple_paths(graph, v[0], target, prune=False)
            assert shorts(pruned) == shorts(unpruned)

    def test_returned_paths_are_independent_copies(self):
        graph, v = diamond_network()
        first, second = simple_paths(graph, v[0], v[4])
        assert first is not second
        assert first.edges[0] is second.edges[0]


class TestPathIndex:

    def test_observations_without_paths_are_registered(self):
        graph, v, observations = branched_network()
        lost = Observation(v[5], v[0], 1, 2)

        index = enumerate_paths(graph, observations + [lost])

        assert index.observations == observations + [lost]
        assert index.paths_for(lost) == []
        assert lost in index
        assert index.total_paths == 2

    def test_paths_for_returns_a_copy(self):
        graph, _, observations = branched_network()
        index = enumerate_paths(graph, observations)
        index.paths_for(observations[0]).clear()
        assert len(index.paths_for(observations[0])) == 1

    def test_empty_index(self):
        index = PathIndex()
        assert len(index) == 0
        assert index.paths_for(object()) == []


class TestSingleOrigin:

    def test_same_paths_as_per_observation_search(self):
        graph, v = build_graph(4, [
            (0, 1, 1, 2), (1, 2, 1, 2), (2, 1, 1, 2),
            (1, 3, 1, 2), (2, 3, 1, 2), (3, 0, 1, 2),
        ])
        observations = [
            Observation(v[0], v[3], 0, 10),
            Observation(v[0], v[2], 0, 10),
            Observation(v[0], v[0], 0, 10),
        ]

        fused, _ = single_origin_paths(graph, observations)
        separate = enumerate_paths(graph, observations)

        for observation in observations:
            assert shorts(fused.paths_for(observation)) == \
                shorts(separate.paths_for(observation))

    def test_predictions_carry_start_time(self):
        graph, v, observations = branched_network()

        index, predictions = single_origin_paths(graph, observations, start_time=5)

        to_five = index.paths_for(observations[0])[0]
        to_six = index.paths_for(observations[1])[0]
        assert predictions[to_five] == Interval(60, 88)
        assert predictions[to_six] == Interval(52, 1057)

    def test_mixed_origins_are_rejected(self):
        graph, v, _ = branched_network()
        with pytest.raises(ValueError):
            single_origin_paths(graph, [
                Observation(v[0], v[5], 1, 2),
                Observation(v[1], v[5], 1, 2),
            ])

    def test_no_observations(self):
        graph, _, _ = branched_network()
        index, predictions = single_origin_paths(graph, [])
        assert len(index) == 0
        assert predictions == {}
