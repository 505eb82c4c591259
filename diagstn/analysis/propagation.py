"""
Weight Propagation
==================

Turns path predictions into correction intervals for the edges on each path.

Two strategies share one interface:
- BaselinePropagation: exact-match corrections, multi-path combination and
  consistency-hazard detection
- ConsistencyPropagation: overlap-based corrections (fault-model free)

BOUNDARY ENFORCEMENT:
=====================
- propagate() is pure: it reads predictions and returns an outcome
- combine() is the only place an outcome is written into a context and onto
  the observation's flags
- Edge bounds are never modified here
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..contracts.base import Interval, hull_of
from ..contracts.network import DEdge, EdgeKey, Observation
from ..core.path import GraphPath
from .context import PropagationContext


@dataclass(frozen=True)
class ObservationOutcome:
    """Everything one observation's propagation produced."""
    observation: Observation
    paths: Tuple[GraphPath, ...]
    predictions: Tuple[Interval, ...]
    path_changes: Tuple[Interval, ...]
    fix_needed: bool
    more_accurate: bool
    inconsistent: bool
    combined: Optional[Interval] = None
    hazard_paths: FrozenSet[int] = frozenset()
    edge_changes: Tuple[Tuple[DEdge, Interval], ...] = field(default_factory=tuple)


def running_intersection(predictions: Sequence[Interval]) -> Optional[Interval]:
    """Intersection of all predictions, None once two of them are disjoint."""
    if not predictions:
        return None
    common: Optional[Interval] = predictions[0]
    for prediction in predictions[1:]:
        common = common.intersect(prediction)
        if common is None:
            return None
    return common


def accuracy_flags(observation: Observation, predictions: Sequence[Interval]) -> List[bool]:
    """Per path: is the prediction narrower than the observation."""
    return [p.width < observation.width for p in predictions]


class PropagationStrategy(ABC):
    """Propagation interface selected by AnalysisConfig.propagation."""

    name: str = "abstract"

    def needs_fix(self, change: Interval) -> bool:
        """Does a per-path correction ask for a change at all."""
        return not change.is_zero

    @abstractmethod
    def propagate(
        self,
        observation: Observation,
        paths: Sequence[GraphPath],
        predictions: Dict[GraphPath, Interval]
    ) -> ObservationOutcome:
        """Compute corrections for one observation's paths."""

    def combine(self, outcome: ObservationOutcome, context: PropagationContext):
        """Write an outcome into the run context and the observation flags."""
        observation = outcome.observation
        observation.fix_needed = outcome.fix_needed
        observation.more_accurate = outcome.more_accurate

        for path, prediction, change in zip(
            outcome.paths, outcome.predictions, outcome.path_changes
        ):
            context.predictions[path] = prediction
            context.path_changes[path] = change

        if outcome.combined is not None:
            context.combined_changes[observation] = outcome.combined
        if outcome.inconsistent:
            context.mark_inconsistent(observation)

        for edge, change in outcome.edge_changes:
            context.add_possible_change(edge, change)
        for index in sorted(outcome.hazard_paths):
            for edge in outcome.paths[index]:
                context.flag_hazard(edge)


class BaselinePropagation(PropagationStrategy):
    """
    Corrections that make a prediction match the observation exactly.

    Per path the correction is [min(dlb, dub), max(dlb, dub)] with
    dlb = obs.lb - pred.lb and dub = obs.ub - pred.ub (signs kept).
    """

    name = "baseline"

    def __init__(self, combine_multipath: bool = True):
        self.combine_multipath = combine_multipath

    def propagate(self, observation, paths, predictions):
        paths = tuple(paths)
        observed = observation.interval
        preds = tuple(predictions[path] for path in paths)

        narrower = accuracy_flags(observation, preds)
        more_accurate = not all(narrower) if preds else False
        inconsistent = len(preds) > 1 and running_intersection(preds) is None

        hazard = set()
        for k in range(len(preds)):
            for m in range(k + 1, len(preds)):
                if narrower[k] and narrower[m] and \
                        preds[k].width + preds[m].width < observation.width:
                    hazard.update((k, m))

        changes = tuple(p.correction_towards(observed) for p in preds)
        fix_needed = any(self.needs_fix(c) for c in changes)

        combined = None
        if self.combine_multipath and len(paths) > 1:
            combined = self.combined_correction(observation, preds)

        return ObservationOutcome(
            observation=observation,
            paths=paths,
            predictions=preds,
            path_changes=changes,
            fix_needed=fix_needed,
            more_accurate=more_accurate,
            inconsistent=inconsistent,
            combined=combined,
            hazard_paths=frozenset(hazard),
            edge_changes=self._edge_changes(paths, changes, combined)
        )

    @staticmethod
    def combined_correction(
        observation: Observation,
        predictions: Sequence[Interval]
    ) -> Optional[Interval]:
        """
        Single correction for the edges every path of the observation shares.
        It is only ever used intersected with each path's own correction.

        A wider observation than the union of predictions is fitted against
        the union bounds, anything else against the intersection. Disjoint
        predictions have no intersection and yield None.
        """
        union = hull_of(predictions)
        if union is None:
            return None
        if observation.width > union.width:
            return union.correction_towards(observation.interval)
        common = running_intersection(predictions)
        if common is None:
            return None
        return common.correction_towards(observation.interval)

    @staticmethod
    def _edge_changes(
        paths: Sequence[GraphPath],
        changes: Sequence[Interval],
        combined: Optional[Interval]
    ) -> Tuple[Tuple[DEdge, Interval], ...]:
        """
        Every edge gets the correction of each path it lies on. Edges shared
        by all paths additionally get the combined correction, recorded last
        so merging starts from it and narrows it to every path's range.
        """
        shared: FrozenSet[EdgeKey] = frozenset()
        if combined is not None:
            shared = frozenset.intersection(*(frozenset(p.edge_keys) for p in paths))

        recorded: List[Tuple[DEdge, Interval]] = []
        for path, change in zip(paths, changes):
            for edge in path:
                recorded.append((edge, change))
        if shared:
            for edge in paths[0]:
                if edge.key in shared:
                    recorded.append((edge, combined))
        return tuple(recorded)


class ConsistencyPropagation(PropagationStrategy):
    """
    Corrections that only need the prediction to overlap the observation.

    Per path the correction is [min(dlb, dub), max(dlb, dub)] with
    dlb = obs.lb - pred.ub and dub = obs.ub - pred.lb. It contains 0 exactly
    when the two intervals already overlap, which is when no fix is needed.
    """

    name = "consistency"

    def needs_fix(self, change: Interval) -> bool:
        return not change.contains(0)

    def propagate(self, observation, paths, predictions):
        paths = tuple(paths)
        observed = observation.interval
        preds = tuple(predictions[path] for path in paths)

        narrower = accuracy_flags(observation, preds)
        changes = tuple(p.overlap_correction_towards(observed) for p in preds)

        edge_changes = tuple(
            (edge, change) for path, change in zip(paths, changes) for edge in path
        )
        return ObservationOutcome(
            observation=observation,
            paths=paths,
            predictions=preds,
            path_changes=changes,
            fix_needed=any(self.needs_fix(c) for c in changes),
            more_accurate=not all(narrower) if preds else False,
            inconsistent=len(preds) > 1 and running_intersection(preds) is None,
            edge_changes=edge_changes
        )


def make_strategy(propagation: str, combine_multipath: bool = True) -> PropagationStrategy:
    if propagation == BaselinePropagation.name:
        return BaselinePropagation(combine_multipath)
    if propagation == ConsistencyPropagation.name:
        return ConsistencyPropagation()
    raise ValueError(f"Unknown propagation strategy: {propagation}")
