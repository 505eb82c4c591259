"""
Problem Loading
===============

Reads a diagnosis problem (network, observations, fixed start times) from a
YAML or JSON document:

    vertices:      [{id: 0, name: "0"}, ...]
    edges:         [{start: 0, end: 1, lb: 10, ub: 15, contingent: false}, ...]
    observations:  [{start: 0, end: 5, lb: 85, ub: 100}, ...]
    fixed_times:   [{vertex: 0, time: 0}, ...]          (optional)

BOUNDARY ENFORCEMENT:
=====================
- Malformed documents are reported as MALFORMED_PROBLEM failures
- Graph rejections (unknown vertices, inverted bounds) abort the load with
  the graph's own error
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union
import json

import yaml

from .analysis.engine import DiagnosisEngine
from .config import AnalysisConfig
from .contracts.base import Error, ErrorCode, Result
from .contracts.network import Observation, Vertex
from .core.graph import Graph


@dataclass
class Problem:
    """A network together with what was observed on it."""
    graph: Graph
    observations: List[Observation] = field(default_factory=list)
    fixed_times: Dict[int, int] = field(default_factory=dict)
    source: Optional[str] = None


def _malformed(message: str, **context: object) -> Result:
    return Result.failure(Error.create(ErrorCode.MALFORMED_PROBLEM, message, **context))


def _entries(data: Mapping[str, Any], section: str, required: bool = True):
    entries = data.get(section)
    if entries is None:
        return None if required else []
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        return None
    return entries


def parse_problem(data: Any, source: Optional[str] = None) -> Result:
    """Build a Problem from an already parsed document."""
    if not isinstance(data, dict):
        return _malformed("Problem document must be a mapping", source=source)

    vertices = _entries(data, "vertices")
    edges = _entries(data, "edges")
    observations = _entries(data, "observations")
    fixed_times = _entries(data, "fixed_times", required=False)
    for section, entries in (
        ("vertices", vertices), ("edges", edges),
        ("observations", observations), ("fixed_times", fixed_times),
    ):
        if entries is None:
            return _malformed(f"Section '{section}' must be a list of mappings", section=section)

    graph = Graph()
    try:
        for entry in vertices:
            result = graph.add_vertex(Vertex(int(entry["id"]), str(entry.get("name") or "")))
            if result.is_failure:
                return result

        for entry in edges:
            start = graph.get_vertex(int(entry["start"]))
            end = graph.get_vertex(int(entry["end"]))
            if start.is_failure:
                return start
            if end.is_failure:
                return end
            result = graph.add_edge(
                start.value, end.value,
                int(entry["lb"]), int(entry["ub"]),
                bool(entry.get("contingent", False))
            )
            if result.is_failure:
                return result

        problem = Problem(graph=graph, source=source)
        for entry in observations:
            start = graph.get_vertex(int(entry["start"]))
            end = graph.get_vertex(int(entry["end"]))
            if start.is_failure:
                return start
            if end.is_failure:
                return end
            problem.observations.append(
                Observation(start.value, end.value, int(entry["lb"]), int(entry["ub"]))
            )

        for entry in fixed_times:
            vertex_id = int(entry["vertex"])
            if vertex_id in problem.fixed_times:
                return Result.failure(Error.create(
                    ErrorCode.DUPLICATE_FIXED_TIME,
                    f"Vertex {vertex_id} has more than one fixed time",
                    vertex=vertex_id
                ))
            problem.fixed_times[vertex_id] = int(entry["time"])
    except KeyError as missing:
        return _malformed(f"Missing field {missing}", source=source)
    except (TypeError, ValueError) as exc:
        return _malformed(f"Invalid value: {exc}", source=source)

    return Result.success(problem)


def load_problem(path: Union[str, Path]) -> Result:
    """Read a YAML (or .json) problem file."""
    path = Path(path)
    if not path.is_file():
        return Result.failure(Error.create(
            ErrorCode.PROBLEM_NOT_FOUND,
            f"Problem file does not exist: {path}",
            path=str(path)
        ))

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        return _malformed(f"Could not parse {path.name}: {exc}", path=str(path))

    return parse_problem(data, source=str(path))


def build_engine(problem: Problem, config: Optional[AnalysisConfig] = None) -> Result:
    """Engine with the problem's observations and fixed times registered."""
    engine = DiagnosisEngine(problem.graph, config)
    for vertex_id, fixed_time in problem.fixed_times.items():
        vertex = problem.graph.get_vertex(vertex_id)
        if vertex.is_failure:
            return vertex
        result = engine.add_fixed_time(vertex.value, fixed_time)
        if result.is_failure:
            return result
    for observation in problem.observations:
        result = engine.add_observation(observation)
        if result.is_failure:
            return result
    return Result.success(engine)
