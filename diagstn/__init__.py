"""
Simple Temporal Network Diagnosis

Finds which edges of a temporal network are wrong, and by how much, when
measured intervals between events disagree with what the network predicts.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Responsibility: Value types, Interval arithmetic, Error/Result
   - Outputs: Vertex, DEdge, Observation, InjectedFault
   - MUST NOT: Depend on any other layer

2. CORE NETWORK MODEL (core/)
   - Responsibility: Graph structure, adjacency, paths
   - Allowed inputs: Vertices and edges from a collaborator or loader
   - MUST NOT: Hold diagnosis state

3. ANALYSIS (analysis/)
   - Responsibility: Path enumeration, weight propagation, diagnosis search
   - Allowed inputs: Graph, Observations, fixed start times, AnalysisConfig
   - Outputs: Diagnosis / ConDiagnosis lists
   - MUST NOT: Modify the graph (results are applied to copies)

4. OBSERVABILITY (observability/)
   - Responsibility: Diagnostic log entries, metrics
   - MUST NOT: Modify system behavior

Outer surfaces: loader (problem files), report (text), evaluation (scoring
against injected faults), cli.

CONSTRAINTS ENFORCED:
=====================
- Deterministic: identical inputs give identical diagnoses in identical order
- Explicit errors: rejections are Result failures, warnings are queryable
- Per-run state: every propagation run starts from a fresh context
"""

from .config import AnalysisConfig, ENGINE_PRESETS
from .contracts import (
    ErrorCode, Error, Result, Interval,
    Vertex, DEdge, Observation, InjectedFault,
)
from .core import Graph, GraphMetrics, GraphPath
from .analysis import (
    DiagnosisEngine, create_engine, Diagnosis, ConDiagnosis, PropagationContext,
)
from .loader import Problem, load_problem, parse_problem, build_engine

__version__ = "0.1.0"

__all__ = [
    "AnalysisConfig", "ENGINE_PRESETS",
    "ErrorCode", "Error", "Result", "Interval",
    "Vertex", "DEdge", "Observation", "InjectedFault",
    "Graph", "GraphMetrics", "GraphPath",
    "DiagnosisEngine", "create_engine", "Diagnosis", "ConDiagnosis",
    "PropagationContext",
    "Problem", "load_problem", "parse_problem", "build_engine",
]
