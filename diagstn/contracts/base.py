"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
Errors, results and intervals are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Layers may import types but MUST NOT modify this module
- Failures are reported as Error values, never as console text
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple
from enum import Enum, auto


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.
    No silent fallbacks - every error state is enumerated.
    """
    # Graph construction errors
    INVALID_EDGE = auto()
    INVALID_BOUNDS = auto()
    DUPLICATE_EDGE = auto()
    DUPLICATE_VERTEX = auto()
    VERTEX_NOT_FOUND = auto()
    EDGE_NOT_FOUND = auto()
    REVERSED_EDGE = auto()

    # Analysis errors
    DUPLICATE_FIXED_TIME = auto()
    INCONSISTENT_OBSERVATION = auto()
    NO_PATHS = auto()
    NO_OBSERVATIONS = auto()
    MIXED_ORIGIN = auto()
    STAGE_ORDER = auto()

    # Problem loading errors
    MALFORMED_PROBLEM = auto()
    PROBLEM_NOT_FOUND = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str, **context: object) -> Error:
        """Build an error stamped with the current UTC time."""
        return Error(
            code=code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple((k, str(v)) for k, v in context.items())
        )

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )

    def context_value(self, key: str) -> Optional[str]:
        for k, v in self.context:
            if k == key:
                return v
        return None


@dataclass(frozen=True)
class Result:
    """
    Generic result type for operations that can fail.
    Either contains a value OR an error, never both.
    """
    value: Optional[object] = None
    error: Optional[Error] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @staticmethod
    def success(value: object = None) -> Result:
        return Result(value=value, error=None)

    @staticmethod
    def failure(error: Error) -> Result:
        return Result(value=None, error=error)


# =============================================================================
# INTERVAL ARITHMETIC
# =============================================================================

@dataclass(frozen=True)
class Interval:
    """
    Immutable closed integer interval [lower, upper].

    Used for edge bounds, predicted path intervals, observed intervals and
    correction intervals alike.
    """
    lower: int
    upper: int

    def __post_init__(self):
        if self.lower > self.upper:
            raise ValueError(
                f"Interval lower bound {self.lower} exceeds upper bound {self.upper}"
            )

    @staticmethod
    def spanning(a: int, b: int) -> Interval:
        """Interval between two values in either order."""
        return Interval(min(a, b), max(a, b))

    @staticmethod
    def zero() -> Interval:
        return Interval(0, 0)

    @property
    def width(self) -> int:
        return self.upper - self.lower

    @property
    def is_zero(self) -> bool:
        return self.lower == 0 and self.upper == 0

    def contains(self, value: int) -> bool:
        return self.lower <= value <= self.upper

    def encloses(self, other: Interval) -> bool:
        return self.lower <= other.lower and other.upper <= self.upper

    def nested_with(self, other: Interval) -> bool:
        """One of the two intervals encloses the other."""
        return self.encloses(other) or other.encloses(self)

    def overlaps(self, other: Interval) -> bool:
        return not (other.lower > self.upper or other.upper < self.lower)

    def intersect(self, other: Interval) -> Optional[Interval]:
        """Intersection, or None when the intervals are disjoint."""
        if not self.overlaps(other):
            return None
        return Interval(max(self.lower, other.lower), min(self.upper, other.upper))

    def hull(self, other: Interval) -> Interval:
        """Smallest interval covering both (the union bounds)."""
        return Interval(min(self.lower, other.lower), max(self.upper, other.upper))

    def shifted(self, delta: int) -> Interval:
        return Interval(self.lower + delta, self.upper + delta)

    def __add__(self, other: Interval) -> Interval:
        return Interval(self.lower + other.lower, self.upper + other.upper)

    def correction_towards(self, observed: Interval) -> Interval:
        """
        Correction interval that reconciles this prediction with an observation.

        No absolute value is taken: the deltas keep their sign and the
        interval is formed from their min and max.
        """
        return Interval.spanning(
            observed.lower - self.lower,
            observed.upper - self.upper
        )

    def overlap_correction_towards(self, observed: Interval) -> Interval:
        """
        Shifts of this prediction for which it still overlaps the observation.
        Contains 0 exactly when the two intervals already overlap.
        """
        return Interval.spanning(
            observed.lower - self.upper,
            observed.upper - self.lower
        )

    def __str__(self) -> str:
        return f"[{self.lower},{self.upper}]"


def hull_of(intervals: Iterable[Interval]) -> Optional[Interval]:
    """Union bounds of a collection of intervals (None when empty)."""
    combined: Optional[Interval] = None
    for interval in intervals:
        combined = interval if combined is None else combined.hull(interval)
    return combined
