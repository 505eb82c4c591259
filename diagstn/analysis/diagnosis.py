"""
Diagnosis Results
=================

Diagnosis: edges with a correction interval (fault model known).
ConDiagnosis: faulty/correct edge sets without magnitudes.

BOUNDARY ENFORCEMENT:
=====================
- Both are built incrementally by the search and handed out as results
- Edges are addressed by key; a diagnosis can be applied to any graph that
  has the same edge keys (e.g. a copy)
- apply() never touches the source graph
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

from ..contracts.base import Interval
from ..contracts.network import DEdge, EdgeKey
from ..core.graph import Graph
from ..core.path import GraphPath


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


# =============================================================================
# DIAGNOSIS (with fault model)
# =============================================================================

class Diagnosis:
    """
    Full or partial diagnosis: edge -> correction [dlb, dub].

    Edges that are not part of the diagnosis are unchanged ([0,0]).
    Ordering: fewer corrected edges first, then the smaller absolute signed
    tally of correction directions.
    """

    def __init__(self):
        self._changes: Dict[EdgeKey, Tuple[DEdge, Interval]] = {}

    def add_partial(self, edge: DEdge, change: Interval):
        """Blame an edge for a path with the given correction."""
        self._changes[edge.key] = (edge, change)

    def extended(self, edge: DEdge, change: Interval) -> Diagnosis:
        child = self.copy()
        child.add_partial(edge, change)
        return child

    def edge_used(self, edge: DEdge) -> bool:
        return edge.key in self._changes

    def path_used(self, path: GraphPath) -> bool:
        """Some edge of the path is already corrected by this diagnosis."""
        return any(edge.key in self._changes for edge in path)

    covers = path_used

    def changes_for(self, edge: DEdge) -> Interval:
        entry = self._changes.get(edge.key)
        return entry[1] if entry else Interval.zero()

    @property
    def edges_changed(self) -> List[DEdge]:
        return [edge for edge, _ in self._changes.values()]

    def as_mapping(self) -> Dict[EdgeKey, Interval]:
        return {key: change for key, (_, change) in self._changes.items()}

    @property
    def size(self) -> int:
        return len(self._changes)

    @property
    def tally(self) -> int:
        """+1/-1 for every nonzero correction bound, by its sign."""
        total = 0
        for _, change in self._changes.values():
            total += _sign(change.lower) + _sign(change.upper)
        return total

    def sort_key(self) -> Tuple[int, int]:
        return (self.size, abs(self.tally))

    def compare_to(self, other: Diagnosis) -> int:
        mine, theirs = self.sort_key(), other.sort_key()
        return (mine > theirs) - (mine < theirs)

    def __lt__(self, other: Diagnosis) -> bool:
        return self.sort_key() < other.sort_key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Diagnosis):
            return NotImplemented
        return self.as_mapping() == other.as_mapping()

    __hash__ = None

    def copy(self) -> Diagnosis:
        clone = Diagnosis()
        clone._changes = dict(self._changes)
        return clone

    def apply(self, graph: Graph) -> Graph:
        """
        New graph with every corrected edge shifted by its dlb.

        Both bounds move by the same amount (minimal shift), so the width of
        each corrected edge is unchanged.
        """
        corrected = graph.copy()
        for key, (_, change) in self._changes.items():
            edge = corrected.edge_by_key(key)
            if edge is None:
                continue
            corrected.change_edge_bounds(
                edge.start, edge.end,
                edge.lower_bound + change.lower,
                edge.upper_bound + change.lower
            )
        return corrected

    def describe(self) -> str:
        parts = ["Delta = {"]
        for edge, change in self._changes.values():
            # unchanged edges are not listed
            if not change.is_zero:
                parts.append(f"d{edge.label} ∈ {change} ")
        parts.append("d-rest = [0,0]}")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"Diagnosis({self.describe()})"


# =============================================================================
# CONSISTENCY BASED DIAGNOSIS (no fault model)
# =============================================================================

class ConDiagnosis:
    """Set of abnormal (faulty) edges, with the edges known to be correct."""

    def __init__(self):
        self._faulty: Dict[EdgeKey, DEdge] = {}
        self._correct: Dict[EdgeKey, DEdge] = {}

    def add_faulty_edge(self, edge: DEdge):
        if edge.key in self._correct:
            raise ValueError(f"Edge {edge.label} is already marked correct")
        self._faulty.setdefault(edge.key, edge)

    def add_correct_edge(self, edge: DEdge):
        self._correct.setdefault(edge.key, edge)

    def extended(self, edge: DEdge, change: Optional[Interval] = None) -> ConDiagnosis:
        child = self.copy()
        child.add_faulty_edge(edge)
        return child

    def edge_correct(self, edge: DEdge) -> bool:
        return edge.key in self._correct

    def edge_solved(self, edge: DEdge) -> bool:
        return edge.key in self._faulty

    def path_solved(self, path: GraphPath) -> bool:
        return any(edge.key in self._faulty for edge in path)

    covers = path_solved

    def is_subset_or_equal(self, other: ConDiagnosis) -> bool:
        """Every faulty edge of this diagnosis is faulty in the other one."""
        return all(key in other._faulty for key in self._faulty)

    @property
    def size(self) -> int:
        return len(self._faulty)

    @property
    def faulty_edges(self) -> List[DEdge]:
        return list(self._faulty.values())

    @property
    def correct_edges(self) -> List[DEdge]:
        return list(self._correct.values())

    def copy(self) -> ConDiagnosis:
        clone = ConDiagnosis()
        clone._faulty = dict(self._faulty)
        clone._correct = dict(self._correct)
        return clone

    def describe(self) -> str:
        faults = "".join(f"d{edge.label} ˄ " for edge in self._faulty.values())
        return f"Abnormal = {{{faults}}} , d-rest = normal"

    def __repr__(self) -> str:
        return f"ConDiagnosis({self.describe()})"

    @staticmethod
    def minimal(diagnoses: Sequence[ConDiagnosis]) -> List[ConDiagnosis]:
        """
        Keep only inclusion-minimal fault sets, in input order.
        Of several equal sets the first one is kept.
        """
        kept: List[ConDiagnosis] = []
        for i, candidate in enumerate(diagnoses):
            dominated = False
            for j, other in enumerate(diagnoses):
                if i == j or not other.is_subset_or_equal(candidate):
                    continue
                if other.size < candidate.size or j < i:
                    dominated = True
                    break
            if not dominated:
                kept.append(candidate)
        return kept
