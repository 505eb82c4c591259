"""
Evaluation Tests

Scoring diagnoses against injected faults and coverage measures.
"""

import pytest

from diagstn.analysis.engine import create_engine
from diagstn.contracts.base import Interval
from diagstn.contracts.network import InjectedFault
from diagstn.evaluation import (
    compare_diagnosis_size, describe_faults, error_in_con_diagnoses,
    error_in_diagnoses, number_unique_edges, total_change_width,
    total_number_edges, total_prediction_size, union_intervals,
)

from .fixtures import branched_network, edge


@pytest.fixture
def diagnosed_engine():
    graph, _, observations = branched_network()
    engine = create_engine(graph)
    for observation in observations:
        engine.add_observation(observation)
    engine.run()
    return graph, observations, engine


class TestFaultScoring:

    def test_fault_inside_correction_is_found(self, diagnosed_engine):
        graph, _, engine = diagnosed_engine
        fault = InjectedFault(edge(graph, 0, 1), 18)
        assert error_in_diagnoses([fault], engine.diagnoses)

    def test_fault_outside_correction_is_missed(self, diagnosed_engine):
        graph, _, engine = diagnosed_engine
        fault = InjectedFault(edge(graph, 0, 1), 25)
        assert not error_in_diagnoses([fault], engine.diagnoses)

    def test_zero_difference_is_not_a_fault(self, diagnosed_engine):
        graph, _, engine = diagnosed_engine
        faults = [InjectedFault(edge(graph, 0, 1), 18), InjectedFault(edge(graph, 2, 4), 0)]
        assert error_in_diagnoses(faults, engine.diagnoses)

    def test_consistency_based_scoring(self, diagnosed_engine):
        graph, _, engine = diagnosed_engine
        diagnoses = engine.generate_con_diagnosis()

        assert error_in_con_diagnoses([InjectedFault(edge(graph, 2, 3), 20)], diagnoses)
        assert not error_in_con_diagnoses([InjectedFault(edge(graph, 0, 1), 20)], diagnoses)

    def test_describe_faults(self, diagnosed_engine):
        graph, _, _ = diagnosed_engine
        assert describe_faults([InjectedFault(edge(graph, 0, 1), 18)]) == ["d0,1 by: 18"]


class TestSizes:

    def test_change_width(self, diagnosed_engine):
        _, _, engine = diagnosed_engine
        first_two = engine.diagnoses[:2]

        assert total_change_width(first_two) == 4
        assert compare_diagnosis_size(first_two, engine.diagnoses[:1]) == 2

    def test_prediction_size(self, diagnosed_engine):
        graph, observations, _ = diagnosed_engine
        assert total_prediction_size(graph, observations) == 28 + 1005

    def test_edge_counts(self, diagnosed_engine):
        graph, observations, _ = diagnosed_engine
        assert number_unique_edges(graph, observations) == 6
        assert total_number_edges(graph, observations) == 8

    def test_union_intervals(self):
        assert union_intervals([Interval(3, 5), Interval(-1, 2)]) == Interval(-1, 5)
        with pytest.raises(ValueError):
            union_intervals([])
