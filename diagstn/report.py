"""
Text Reports

Renders engine state as lines of text. Nothing here prints; the CLI decides
where lines go.
"""

from __future__ import annotations
from typing import List, Optional, Sequence

from .analysis.context import PropagationContext
from .analysis.diagnosis import ConDiagnosis, Diagnosis
from .analysis.engine import DiagnosisEngine
from .contracts.network import Observation


def format_paths(engine: DiagnosisEngine) -> List[str]:
    lines = ["=== Path overview ==="]
    for observation in engine.observations:
        lines.append(f"Observation: {observation.label}")
        lines.append("")
        for path in engine.paths_for(observation):
            lines.append(path.describe())
    return lines


def format_observation_weights(
    engine: DiagnosisEngine,
    observation: Observation
) -> List[str]:
    lines = ["=== Observation per path differences ==="]
    context = engine.context
    if context is None:
        return lines
    for path in engine.paths_for(observation):
        lines.append(path.describe())
        change = context.path_changes.get(path)
        if change is not None:
            lines.append(f"Change between lb:{change.lower} ub:{change.upper}")

    combined = context.combined_changes.get(observation)
    if combined is not None:
        lines.append(f"Combined change on shared edges lb:{combined.lower} ub:{combined.upper}")
    if context.is_inconsistent(observation):
        lines.append("Inconsistent path predictions for this observation")
    if engine.config.report_accuracy:
        if observation.more_accurate:
            lines.append("Observation is more accurate than prediction")
        else:
            lines.append("Observation is less accurate than prediction")
    return lines


def format_weights(engine: DiagnosisEngine) -> List[str]:
    """Per-path differences of every observation that needs a fix."""
    lines: List[str] = []
    for observation in engine.observations:
        if observation.fix_needed:
            lines.extend(format_observation_weights(engine, observation))
    return lines


def hazard_note(diagnosis: Diagnosis, context: Optional[PropagationContext]) -> Optional[str]:
    if context is None:
        return None
    flagged = [e.label for e in diagnosis.edges_changed if context.has_hazard(e)]
    if not flagged:
        return None
    return "(!) possible consistency problem when combining changes on: " + \
        " ".join(f"d{label}" for label in flagged)


def format_diagnoses(
    diagnoses: Sequence[Diagnosis],
    context: Optional[PropagationContext] = None
) -> List[str]:
    lines = ["=== Diagnosis overview ==="]
    for number, diagnosis in enumerate(diagnoses, start=1):
        lines.append(f"Diagnosis: {number}")
        lines.append(diagnosis.describe())
        note = hazard_note(diagnosis, context)
        if note:
            lines.append(note)
    return lines


def format_con_diagnoses(diagnoses: Sequence[ConDiagnosis]) -> List[str]:
    lines = ["=== Consistency based diagnosis overview ==="]
    for number, diagnosis in enumerate(diagnoses, start=1):
        lines.append(f"Diagnosis: {number}")
        lines.append(diagnosis.describe())
    return lines
