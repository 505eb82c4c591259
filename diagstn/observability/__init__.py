"""
Observability & Audit Layer

RESPONSIBILITY: Diagnostic messages, metrics
ALLOWED INPUTS: Warnings and measurements from the graph and analysis layers
OUTPUTS: DiagnosticEntry records, Error values, MetricPoint series

WHAT THIS LAYER MUST NOT DO:
============================
- Modify system behavior
- Filter or interpret events (only record them)
- Make decisions based on logged data

Each layer owns its own collector. Entries are append-only and are also
forwarded to the standard library logger ``diagstn.<layer>``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from enum import Enum
import logging

from ..contracts.base import Error, ErrorCode


# =============================================================================
# DIAGNOSTIC LOG (One per layer)
# =============================================================================

class Severity(Enum):
    """Severity of a diagnostic entry."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class DiagnosticEntry:
    """Immutable diagnostic record."""
    sequence: int
    severity: Severity
    code: Optional[ErrorCode]
    message: str
    layer: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def as_error(self) -> Error:
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context
        )


class DiagnosticLog:
    """
    Append-only collector of diagnostic messages for one layer.

    Replaces console warnings: callers query entries instead of parsing text.
    """

    def __init__(self, layer_name: str):
        self._layer_name = layer_name
        self._entries: List[DiagnosticEntry] = []
        self._sequence: int = 0
        self._logger = logging.getLogger(f"diagstn.{layer_name}")

    def record(
        self,
        severity: Severity,
        code: Optional[ErrorCode],
        message: str,
        **context: object
    ) -> DiagnosticEntry:
        """Collect a diagnostic entry (append-only)."""
        entry = DiagnosticEntry(
            sequence=self._sequence,
            severity=severity,
            code=code,
            message=message,
            layer=self._layer_name,
            timestamp=datetime.now(timezone.utc),
            context=tuple((k, str(v)) for k, v in context.items())
        )
        self._entries.append(entry)
        self._sequence += 1
        self._logger.log(_LEVELS[severity], message, extra={"diag_code": code})
        return entry

    def info(self, message: str, code: Optional[ErrorCode] = None, **context: object):
        return self.record(Severity.INFO, code, message, **context)

    def warning(self, code: ErrorCode, message: str, **context: object):
        return self.record(Severity.WARNING, code, message, **context)

    def error(self, error: Error) -> DiagnosticEntry:
        """Record an already-built Error value."""
        entry = DiagnosticEntry(
            sequence=self._sequence,
            severity=Severity.ERROR,
            code=error.code,
            message=error.message,
            layer=self._layer_name,
            timestamp=error.timestamp,
            context=error.context
        )
        self._entries.append(entry)
        self._sequence += 1
        self._logger.error(error.message, extra={"diag_code": error.code})
        return entry

    def entries(
        self,
        severity: Optional[Severity] = None,
        code: Optional[ErrorCode] = None
    ) -> List[DiagnosticEntry]:
        """Get entries, optionally filtered."""
        entries = self._entries
        if severity:
            entries = [e for e in entries if e.severity == severity]
        if code:
            entries = [e for e in entries if e.code == code]
        return list(entries)

    def errors(self, code: Optional[ErrorCode] = None) -> List[Error]:
        """All coded entries as Error values."""
        return [e.as_error() for e in self.entries(code=code) if e.code is not None]

    def has(self, code: ErrorCode) -> bool:
        return any(e.code == code for e in self._entries)

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class MetricType(Enum):
    """Types of metrics collected."""
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMING = "timing"


@dataclass
class MetricDefinition:
    """Definition of a metric to collect."""
    name: str
    metric_type: MetricType
    description: str


@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    timestamp: datetime
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


class MetricsCollector:
    """
    Collect measurements from one analysis run.

    Metrics are append-only series of data points.
    """

    def __init__(self):
        self._metrics: Dict[str, List[MetricPoint]] = {}
        self._definitions: Dict[str, MetricDefinition] = {}
        self._register_default_metrics()

    def _register_default_metrics(self):
        """Register standard metrics."""
        defaults = [
            MetricDefinition(
                name="paths_enumerated_total",
                metric_type=MetricType.COUNTER,
                description="Simple paths discovered for all observations"
            ),
            MetricDefinition(
                name="observations_needing_fix",
                metric_type=MetricType.GAUGE,
                description="Observations whose paths disagree with the model"
            ),
            MetricDefinition(
                name="inconsistent_observations",
                metric_type=MetricType.GAUGE,
                description="Observations with disjoint path predictions"
            ),
            MetricDefinition(
                name="search_states_expanded",
                metric_type=MetricType.COUNTER,
                description="Partial diagnoses expanded by the search"
            ),
            MetricDefinition(
                name="diagnoses_total",
                metric_type=MetricType.GAUGE,
                description="Complete diagnoses produced by the last search"
            ),
            MetricDefinition(
                name="propagation_duration_ms",
                metric_type=MetricType.TIMING,
                description="Weight propagation time in milliseconds"
            ),
            MetricDefinition(
                name="search_duration_ms",
                metric_type=MetricType.TIMING,
                description="Diagnosis search time in milliseconds"
            ),
        ]

        for definition in defaults:
            self.register_metric(definition)

    def register_metric(self, definition: MetricDefinition):
        """Register a new metric definition."""
        self._definitions[definition.name] = definition
        if definition.name not in self._metrics:
            self._metrics[definition.name] = []

    def record(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        """Record a metric data point."""
        if metric_name not in self._metrics:
            self._metrics[metric_name] = []

        label_tuple = tuple(sorted(labels.items())) if labels else ()

        point = MetricPoint(
            metric_name=metric_name,
            value=value,
            timestamp=datetime.now(timezone.utc),
            labels=label_tuple
        )
        self._metrics[metric_name].append(point)

    def get_metric(self, metric_name: str) -> List[MetricPoint]:
        return list(self._metrics.get(metric_name, []))

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        """Get the latest value for a metric."""
        points = self._metrics.get(metric_name, [])
        return points[-1] if points else None

    def definition(self, metric_name: str) -> Optional[MetricDefinition]:
        return self._definitions.get(metric_name)

    def compute_aggregates(self, metric_name: str) -> Dict[str, float]:
        """Compute aggregate statistics for a metric."""
        points = self.get_metric(metric_name)

        if not points:
            return {}

        values = [p.value for p in points]

        return {
            'count': len(values),
            'sum': sum(values),
            'min': min(values),
            'max': max(values),
            'avg': sum(values) / len(values),
        }


__all__ = [
    "Severity", "DiagnosticEntry", "DiagnosticLog",
    "MetricType", "MetricDefinition", "MetricPoint", "MetricsCollector",
]
