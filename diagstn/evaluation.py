"""
Diagnosis Evaluation

Scores diagnosis sets against faults that were injected on purpose, and
measures how much of a network a set of observations covers.

BOUNDARY ENFORCEMENT:
- Read-only over graphs, observations and diagnoses
- Path discovery goes through analysis.enumeration, like the engine
"""

from __future__ import annotations
from typing import Iterable, List, Sequence, Set

from .analysis.diagnosis import ConDiagnosis, Diagnosis
from .analysis.enumeration import simple_paths
from .contracts.base import Interval, hull_of
from .contracts.network import EdgeKey, InjectedFault, Observation
from .core.graph import Graph


def error_in_diagnoses(faults: Sequence[InjectedFault], diagnoses: Iterable[Diagnosis]) -> bool:
    """
    Some diagnosis blames every injected fault with a correction interval
    containing the injected difference. Zero differences are not faults.
    """
    real = [f for f in faults if f.difference != 0]
    for diagnosis in diagnoses:
        if all(
            diagnosis.edge_used(f.edge) and diagnosis.changes_for(f.edge).contains(f.difference)
            for f in real
        ):
            return True
    return False


def error_in_con_diagnoses(
    faults: Sequence[InjectedFault],
    diagnoses: Iterable[ConDiagnosis]
) -> bool:
    """Some consistency based diagnosis marks every injected fault's edge."""
    for diagnosis in diagnoses:
        if all(diagnosis.edge_solved(f.edge) for f in faults):
            return True
    return False


def total_change_width(diagnoses: Iterable[Diagnosis]) -> int:
    total = 0
    for diagnosis in diagnoses:
        for edge in diagnosis.edges_changed:
            total += diagnosis.changes_for(edge).width
    return total


def compare_diagnosis_size(a: Iterable[Diagnosis], b: Iterable[Diagnosis]) -> int:
    """Summed correction widths of a minus those of b."""
    return total_change_width(a) - total_change_width(b)


def union_intervals(intervals: Iterable[Interval]) -> Interval:
    """Union bounds of path predictions; any value inside is possible a priori."""
    union = hull_of(intervals)
    if union is None:
        raise ValueError("Cannot combine an empty list of intervals")
    return union


def total_prediction_size(graph: Graph, observations: Sequence[Observation]) -> int:
    """
    Sum over observations of the width of the union of their path predictions.
    Observations without any path add nothing.
    """
    total = 0
    for observation in observations:
        paths = simple_paths(graph, observation.start, observation.end)
        if paths:
            total += union_intervals(p.predict() for p in paths).width
    return total


def number_unique_edges(graph: Graph, observations: Sequence[Observation]) -> int:
    """Distinct edges lying on some observation's path."""
    seen: Set[EdgeKey] = set()
    for observation in observations:
        for path in simple_paths(graph, observation.start, observation.end):
            seen |= path.edge_keys
    return len(seen)


def total_number_edges(graph: Graph, observations: Sequence[Observation]) -> int:
    """Edges over all observation paths, counted once per path they lie on."""
    return sum(
        len(path)
        for observation in observations
        for path in simple_paths(graph, observation.start, observation.end)
    )


def describe_faults(faults: Sequence[InjectedFault]) -> List[str]:
    return [f"d{fault.edge.label} by: {fault.difference}" for fault in faults]
