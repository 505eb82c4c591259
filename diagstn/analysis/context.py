"""
Propagation Context

Scratch state of ONE propagation run, owned by the engine invocation.

BOUNDARY ENFORCEMENT:
- Written only by propagation strategies (via PropagationStrategy.combine)
- Read by diagnosis search and reports
- Never stored on edges, so repeated runs cannot see stale intervals
"""

from __future__ import annotations
from typing import Dict, List, Optional, Set

from ..contracts.base import Interval
from ..contracts.network import DEdge, EdgeKey, Observation
from ..core.path import GraphPath


class PropagationContext:
    """Per-run record of possible changes, predictions and hazards."""

    def __init__(self):
        self._possible_changes: Dict[EdgeKey, List[Interval]] = {}
        self._hazard_edges: Set[EdgeKey] = set()
        self._inconsistent: Dict[Observation, None] = {}
        self.predictions: Dict[GraphPath, Interval] = {}
        self.path_changes: Dict[GraphPath, Interval] = {}
        self.combined_changes: Dict[Observation, Interval] = {}

    # Possible changes -------------------------------------------------------

    def add_possible_change(self, edge: DEdge, change: Interval):
        self._possible_changes.setdefault(edge.key, []).append(change)

    def possible_changes(self, edge: DEdge) -> List[Interval]:
        """Intervals recorded on the edge, oldest first (a copy)."""
        return list(self._possible_changes.get(edge.key, []))

    @property
    def touched_edges(self) -> List[EdgeKey]:
        return list(self._possible_changes)

    # Consistency hazards ----------------------------------------------------

    def flag_hazard(self, edge: DEdge):
        self._hazard_edges.add(edge.key)

    def has_hazard(self, edge: DEdge) -> bool:
        return edge.key in self._hazard_edges

    # Inconsistent observations ---------------------------------------------

    def mark_inconsistent(self, observation: Observation):
        self._inconsistent.setdefault(observation, None)

    def is_inconsistent(self, observation: Observation) -> bool:
        return observation in self._inconsistent

    @property
    def inconsistent_observations(self) -> List[Observation]:
        return list(self._inconsistent)

    def prediction_for(self, path: GraphPath) -> Optional[Interval]:
        return self.predictions.get(path)
