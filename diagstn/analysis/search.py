"""
Diagnosis Search
================

Backtracking over the unresolved paths: every path must end up covered by a
blamed edge, one blamed edge is added per uncovered path.

BOUNDARY ENFORCEMENT:
=====================
- Candidate edges of path i exclude every edge of paths 0..i-1 (those were
  already offered to earlier paths) and contingent edges
- A candidate's correction is the intersection of its recorded possible
  changes, seeded with the most recent one; a disjoint history drops it
- RecursiveSearch and WorklistSearch produce identical lists in identical
  order
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Set, Tuple, Union

from ..contracts.base import Interval
from ..contracts.network import DEdge, EdgeKey
from ..core.path import GraphPath
from .context import PropagationContext
from .diagnosis import ConDiagnosis, Diagnosis

PartialDiagnosis = Union[Diagnosis, ConDiagnosis]
Candidate = Tuple[DEdge, Optional[Interval]]


def merge_changes(history: Sequence[Interval]) -> Optional[Interval]:
    """
    Intersect a possible-change history, starting from the last entry.
    None when the history is empty or two entries are disjoint.
    """
    if not history:
        return None
    merged = history[-1]
    for change in history[:-1]:
        merged = merged.intersect(change)
        if merged is None:
            return None
    return merged


def consumed_before(paths: Sequence[GraphPath]) -> List[Set[EdgeKey]]:
    """consumed[i] = keys of every edge on paths[:i]."""
    consumed: List[Set[EdgeKey]] = []
    seen: Set[EdgeKey] = set()
    for path in paths:
        consumed.append(set(seen))
        seen |= path.edge_keys
    return consumed


def change_candidates(
    paths: Sequence[GraphPath],
    context: PropagationContext
) -> List[List[Candidate]]:
    """Per path, the edges that may be blamed for it and their correction."""
    consumed = consumed_before(paths)
    options: List[List[Candidate]] = []
    for path, taken in zip(paths, consumed):
        candidates: List[Candidate] = []
        for edge in path:
            if edge.key in taken or edge.contingent:
                continue
            change = merge_changes(context.possible_changes(edge))
            if change is not None:
                candidates.append((edge, change))
        options.append(candidates)
    return options


# =============================================================================
# SEARCH ORDER
# =============================================================================

class DiagnosisSearch(ABC):
    """Depth-first enumeration of complete diagnoses."""

    name: str = "abstract"

    def __init__(self):
        self.states_expanded = 0

    def run(
        self,
        initial: PartialDiagnosis,
        paths: Sequence[GraphPath],
        options: Sequence[Sequence[Candidate]]
    ) -> List[PartialDiagnosis]:
        self.states_expanded = 0
        if not paths:
            return []
        return self._search(initial, list(paths), options)

    @abstractmethod
    def _search(self, initial, paths, options) -> List[PartialDiagnosis]:
        pass


class RecursiveSearch(DiagnosisSearch):
    """Call-stack backtracking; depth grows with the number of paths."""

    name = "recursive"

    def _search(self, initial, paths, options):
        results: List[PartialDiagnosis] = []

        def expand(diagnosis, index):
            self.states_expanded += 1
            if index == len(paths):
                results.append(diagnosis)
                return
            if diagnosis.covers(paths[index]):
                expand(diagnosis, index + 1)
                return
            for edge, change in options[index]:
                expand(diagnosis.extended(edge, change), index + 1)

        expand(initial, 0)
        return results


class WorklistSearch(DiagnosisSearch):
    """
    Same search with an explicit LIFO worklist of (diagnosis, path index).
    Children are pushed in reverse so they pop in candidate order.
    """

    name = "worklist"

    def _search(self, initial, paths, options):
        results: List[PartialDiagnosis] = []
        stack = [(initial, 0)]
        while stack:
            diagnosis, index = stack.pop()
            self.states_expanded += 1
            if index == len(paths):
                results.append(diagnosis)
                continue
            if diagnosis.covers(paths[index]):
                stack.append((diagnosis, index + 1))
                continue
            children = [
                (diagnosis.extended(edge, change), index + 1)
                for edge, change in options[index]
            ]
            stack.extend(reversed(children))
        return results


def make_search(search: str) -> DiagnosisSearch:
    if search == RecursiveSearch.name:
        return RecursiveSearch()
    if search == WorklistSearch.name:
        return WorklistSearch()
    raise ValueError(f"Unknown search order: {search}")


# =============================================================================
# CONSISTENCY BASED (no fault model)
# =============================================================================

def prediction_overlaps(prediction: Interval, observed: Interval) -> bool:
    """Strict overlap: touching end points do not count."""
    return observed.lower < prediction.upper and observed.upper > prediction.lower


class ConsistencySearch:
    """
    Fault-model free diagnosis over every path of every observation.

    Paths whose prediction overlaps their observation prove their edges
    correct; every other path needs a faulty edge that is not correct and
    not consumed by an earlier faulty path.
    """

    def __init__(self, order: DiagnosisSearch):
        self.order = order

    def classify(
        self,
        paths_by_observation,
        context: PropagationContext
    ) -> Tuple[List[GraphPath], ConDiagnosis]:
        faulty: List[GraphPath] = []
        base = ConDiagnosis()
        for observation, paths in paths_by_observation:
            for path in paths:
                prediction = context.prediction_for(path)
                if prediction is None:
                    continue
                if prediction_overlaps(prediction, observation.interval):
                    for edge in path:
                        base.add_correct_edge(edge)
                else:
                    faulty.append(path)
        return faulty, base

    def run(self, paths_by_observation, context: PropagationContext) -> List[ConDiagnosis]:
        faulty, base = self.classify(paths_by_observation, context)
        consumed = consumed_before(faulty)
        options: List[List[Candidate]] = []
        for path, taken in zip(faulty, consumed):
            options.append([
                (edge, None) for edge in path
                if edge.key not in taken
                and not edge.contingent
                and not base.edge_correct(edge)
            ])
        return self.order.run(base, faulty, options)
