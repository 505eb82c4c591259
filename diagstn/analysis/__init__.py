"""
Analysis layer: path enumeration, weight propagation and diagnosis search.
"""

from .context import PropagationContext
from .enumeration import PathIndex, simple_paths, enumerate_paths, single_origin_paths
from .propagation import (
    ObservationOutcome, PropagationStrategy,
    BaselinePropagation, ConsistencyPropagation, make_strategy,
)
from .diagnosis import Diagnosis, ConDiagnosis
from .search import (
    merge_changes, change_candidates, DiagnosisSearch,
    RecursiveSearch, WorklistSearch, ConsistencySearch, make_search,
)
from .engine import DiagnosisEngine, create_engine

__all__ = [
    "PropagationContext",
    "PathIndex", "simple_paths", "enumerate_paths", "single_origin_paths",
    "ObservationOutcome", "PropagationStrategy",
    "BaselinePropagation", "ConsistencyPropagation", "make_strategy",
    "Diagnosis", "ConDiagnosis",
    "merge_changes", "change_candidates", "DiagnosisSearch",
    "RecursiveSearch", "WorklistSearch", "ConsistencySearch", "make_search",
    "DiagnosisEngine", "create_engine",
]
