"""
Diagnosis Engine
================

RESPONSIBILITY: Run the analysis stages for one graph and its observations
ALLOWED INPUTS: Graph, Observations, fixed start times, AnalysisConfig
OUTPUTS: PathIndex, PropagationContext, Diagnosis / ConDiagnosis lists

Stages, in order:
1. generate_paths()      enumerate explaining paths per observation
2. propagate_weights()   derive per-edge possible changes
3. generate_diagnosis()  search blamed-edge sets with corrections
   generate_con_diagnosis() fault-model free alternative to 3

BOUNDARY ENFORCEMENT:
=====================
- The graph is only read; results are applied to copies
- Each propagation run gets a fresh PropagationContext
- Stages called early run their missing prerequisite and record STAGE_ORDER
- Rejections are returned as Result failures and recorded in the engine log
"""

from __future__ import annotations
from typing import Dict, List, Optional
import time

from ..config import AnalysisConfig
from ..contracts.base import Error, ErrorCode, Interval, Result
from ..contracts.network import Observation, Vertex
from ..core.graph import Graph
from ..core.path import GraphPath
from ..observability import DiagnosticLog, MetricsCollector
from .context import PropagationContext
from .diagnosis import ConDiagnosis, Diagnosis
from .enumeration import PathIndex, enumerate_paths, single_origin_paths
from .propagation import PropagationStrategy, make_strategy
from .search import ConsistencySearch, DiagnosisSearch, change_candidates, make_search


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


class DiagnosisEngine:
    """
    Single diagnosis engine; propagation and search order come from config.

    Usage:
        engine = DiagnosisEngine(graph, AnalysisConfig.preset("analyst"))
        engine.add_observation(Observation(v0, v5, 85, 100))
        diagnoses = engine.run()
    """

    def __init__(self, graph: Graph, config: Optional[AnalysisConfig] = None):
        self.graph = graph
        self.config = config or AnalysisConfig()
        self.log = DiagnosticLog("engine")
        self.metrics = MetricsCollector()
        self.strategy: PropagationStrategy = make_strategy(
            self.config.propagation, self.config.combine_multipath
        )
        self.search: DiagnosisSearch = make_search(self.config.search)

        self._observations: List[Observation] = []
        self._fixed_times: Dict[int, int] = {}
        self._paths: Optional[PathIndex] = None
        self._fused_predictions: Dict[GraphPath, Interval] = {}
        self._context: Optional[PropagationContext] = None
        self._diagnoses: List[Diagnosis] = []

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def add_observation(self, observation: Observation) -> Result:
        for vertex in (observation.start, observation.end):
            if not self.graph.has_vertex(vertex):
                error = Error.create(
                    ErrorCode.VERTEX_NOT_FOUND,
                    f"Observation {observation.label} uses vertex {vertex.name} "
                    "which is not part of the network",
                    vertex=vertex.id
                )
                self.log.error(error)
                return Result.failure(error)

        if self.config.single_origin and self._observations:
            origin = self._observations[0].start
            if observation.start != origin:
                error = Error.create(
                    ErrorCode.MIXED_ORIGIN,
                    f"Observation {observation.label} does not start at the "
                    f"shared origin {origin.name}",
                    origin=origin.id,
                    start=observation.start.id
                )
                self.log.error(error)
                return Result.failure(error)

        self._observations.append(observation)
        self._invalidate()
        return Result.success(observation)

    def add_fixed_time(self, vertex: Vertex, fixed_time: int) -> Result:
        """Register the known start time of a vertex; the first one wins."""
        if not self.graph.has_vertex(vertex):
            error = Error.create(
                ErrorCode.VERTEX_NOT_FOUND,
                f"Cannot fix a time on unknown vertex {vertex.name}",
                vertex=vertex.id
            )
            self.log.error(error)
            return Result.failure(error)
        if vertex.id in self._fixed_times:
            error = Error.create(
                ErrorCode.DUPLICATE_FIXED_TIME,
                f"Vertex {vertex.name} already has fixed time "
                f"{self._fixed_times[vertex.id]}, ignoring {fixed_time}",
                vertex=vertex.id,
                time=fixed_time
            )
            self.log.warning(error.code, error.message, vertex=vertex.id, time=fixed_time)
            return Result.failure(error)
        self._fixed_times[vertex.id] = fixed_time
        self._invalidate()
        return Result.success(fixed_time)

    def start_time(self, vertex: Vertex) -> int:
        return self._fixed_times.get(vertex.id, 0)

    def _invalidate(self):
        self._paths = None
        self._fused_predictions = {}
        self._context = None
        self._diagnoses = []

    def _stage_order(self, stage: str, missing: str):
        self.log.warning(
            ErrorCode.STAGE_ORDER,
            f"{stage} called before {missing}, running {missing} first",
            stage=stage,
            missing=missing
        )

    # -------------------------------------------------------------------------
    # Stage 1: paths
    # -------------------------------------------------------------------------

    def generate_paths(self) -> PathIndex:
        self._context = None
        self._diagnoses = []
        self._fused_predictions = {}

        if not self._observations:
            self.log.warning(ErrorCode.NO_OBSERVATIONS, "No observations to explain")
            self._paths = PathIndex()
            return self._paths

        if self.config.single_origin:
            origin = self._observations[0].start
            self._paths, self._fused_predictions = single_origin_paths(
                self.graph, self._observations, self.start_time(origin)
            )
        else:
            self._paths = enumerate_paths(self.graph, self._observations)

        for observation, paths in self._paths.items():
            if not paths:
                self.log.warning(
                    ErrorCode.NO_PATHS,
                    f"Observation {observation.label} has no explaining path",
                    start=observation.start.id,
                    end=observation.end.id
                )
        self.metrics.record("paths_enumerated_total", self._paths.total_paths)
        self.log.info(
            f"Enumerated {self._paths.total_paths} paths for "
            f"{len(self._observations)} observations"
        )
        return self._paths

    # -------------------------------------------------------------------------
    # Stage 2: propagation
    # -------------------------------------------------------------------------

    def propagate_weights(self) -> PropagationContext:
        if self._paths is None:
            self._stage_order("propagate_weights", "generate_paths")
            self.generate_paths()

        started = time.perf_counter()
        context = PropagationContext()
        for observation, paths in self._paths.items():
            if not paths:
                observation.reset_flags()
                continue
            predictions = self._predictions_for(observation, paths)
            outcome = self.strategy.propagate(observation, paths, predictions)
            self.strategy.combine(outcome, context)
            if outcome.inconsistent:
                self.log.warning(
                    ErrorCode.INCONSISTENT_OBSERVATION,
                    f"Inconsistent path predictions for observation {observation.label}",
                    start=observation.start.id,
                    end=observation.end.id
                )

        self._context = context
        self._diagnoses = []
        self.metrics.record("propagation_duration_ms", _elapsed_ms(started))
        self.metrics.record(
            "observations_needing_fix",
            sum(1 for o in self._observations if o.fix_needed)
        )
        self.metrics.record(
            "inconsistent_observations", len(context.inconsistent_observations)
        )
        return context

    def _predictions_for(self, observation: Observation, paths: List[GraphPath]):
        if self._fused_predictions:
            return self._fused_predictions
        offset = self.start_time(observation.start)
        return {path: path.predict(offset) for path in paths}

    # -------------------------------------------------------------------------
    # Stage 3: diagnosis
    # -------------------------------------------------------------------------

    def _require_context(self, stage: str) -> PropagationContext:
        if self._context is None:
            self._stage_order(stage, "propagate_weights")
            self.propagate_weights()
        return self._context

    def selected_observations(self) -> List[Observation]:
        """Observations whose paths the search has to explain."""
        context = self._require_context("selected_observations")
        if not self.config.ignore_inconsistency and context.inconsistent_observations:
            self.log.info("Diagnosing inconsistent observations first")
            return context.inconsistent_observations
        return [o for o in self._observations if o.fix_needed]

    def unresolved_paths(self) -> List[GraphPath]:
        """
        Paths the search must cover, in observation order.

        For observations needing a fix, paths that already agree with the
        observation are left out. Inconsistent observations keep every path.
        """
        context = self._require_context("unresolved_paths")
        unresolved: List[GraphPath] = []
        for observation in self.selected_observations():
            keep_all = context.is_inconsistent(observation) and \
                not self.config.ignore_inconsistency
            for path in self._paths.paths_for(observation):
                change = context.path_changes.get(path)
                if keep_all or change is None or self.strategy.needs_fix(change):
                    unresolved.append(path)
        return unresolved

    def generate_diagnosis(self) -> List[Diagnosis]:
        """Every complete diagnosis, minimal ones first."""
        context = self._require_context("generate_diagnosis")
        unresolved = self.unresolved_paths()

        started = time.perf_counter()
        options = change_candidates(unresolved, context)
        found = self.search.run(Diagnosis(), unresolved, options)
        self._diagnoses = sorted(found, key=Diagnosis.sort_key)

        self.metrics.record("search_duration_ms", _elapsed_ms(started))
        self.metrics.record(
            "search_states_expanded", self.search.states_expanded,
            labels={"search": self.search.name}
        )
        self.metrics.record("diagnoses_total", len(self._diagnoses))
        return list(self._diagnoses)

    def generate_con_diagnosis(self, minimal_only: bool = True) -> List[ConDiagnosis]:
        context = self._require_context("generate_con_diagnosis")
        search = ConsistencySearch(make_search(self.config.search))
        found = search.run(self._paths.items(), context)
        self.metrics.record(
            "search_states_expanded", search.order.states_expanded,
            labels={"search": "consistency"}
        )
        return ConDiagnosis.minimal(found) if minimal_only else found

    def run(self) -> List[Diagnosis]:
        """All three stages in order."""
        self.generate_paths()
        self.propagate_weights()
        return self.generate_diagnosis()

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def observations(self) -> List[Observation]:
        return list(self._observations)

    @property
    def fixed_times(self) -> Dict[int, int]:
        return dict(self._fixed_times)

    @property
    def paths(self) -> Optional[PathIndex]:
        return self._paths

    @property
    def context(self) -> Optional[PropagationContext]:
        return self._context

    @property
    def diagnoses(self) -> List[Diagnosis]:
        return list(self._diagnoses)

    @property
    def diag_size(self) -> int:
        return len(self._diagnoses)

    def paths_for(self, observation: Observation) -> List[GraphPath]:
        if self._paths is None:
            return []
        return self._paths.paths_for(observation)


def create_engine(graph: Graph, preset: str = "analyst", **overrides) -> DiagnosisEngine:
    """Engine configured from a named preset, optionally adjusted."""
    config = AnalysisConfig.preset(preset)
    if overrides:
        config = config.with_options(**overrides)
    return DiagnosisEngine(graph, config)
