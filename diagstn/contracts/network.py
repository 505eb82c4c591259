"""
Network Contracts

Value types for Simple Temporal Networks: events (vertices), constraints
(directed edges) and the observations made on them.

BOUNDARY ENFORCEMENT:
=====================
- Vertex identity is its integer id; names are display only
- Edges are addressed by their (start id, end id) key, never by object identity
- Observation flags are written by propagation and read by diagnosis only
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

from .base import Interval


EdgeKey = Tuple[int, int]


@dataclass(frozen=True)
class Vertex:
    """
    Immutable event in the network.
    Equality and hashing use the id only.
    """
    id: int
    name: str = field(default="", compare=False)

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", str(self.id))


@dataclass(eq=False)
class DEdge:
    """
    Directed temporal constraint start -> end with predicted [lower, upper].

    Bounds may be adjusted by the owning Graph (change_edge_bounds); per-run
    diagnosis scratch state lives in a PropagationContext, not here.
    """
    start: Vertex
    end: Vertex
    lower_bound: int
    upper_bound: int
    contingent: bool = False  # uncontrollable duration, never blamed

    @property
    def key(self) -> EdgeKey:
        return (self.start.id, self.end.id)

    @property
    def bounds(self) -> Interval:
        return Interval(self.lower_bound, self.upper_bound)

    @property
    def label(self) -> str:
        return f"{self.start.name},{self.end.name}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DEdge):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return (
            f"DEdge({self.start.name}->{self.end.name}, "
            f"[{self.lower_bound},{self.upper_bound}])"
        )


@dataclass(eq=False)
class Observation:
    """
    Measured interval between two events.

    Derived flags:
    - fix_needed: some explaining path disagrees with the observation
    - more_accurate: the observation is at most as wide as some prediction
    """
    start: Vertex
    end: Vertex
    lower: int
    upper: int
    fix_needed: bool = False
    more_accurate: bool = False

    def __post_init__(self):
        if self.lower > self.upper:
            raise ValueError(
                f"Observation {self.start.name}->{self.end.name} has lower "
                f"bound {self.lower} above upper bound {self.upper}"
            )

    @property
    def interval(self) -> Interval:
        return Interval(self.lower, self.upper)

    @property
    def width(self) -> int:
        return self.upper - self.lower

    @property
    def label(self) -> str:
        return f"{self.start.name} to {self.end.name}"

    def reset_flags(self):
        self.fix_needed = False
        self.more_accurate = False


@dataclass(frozen=True)
class InjectedFault:
    """A known error placed on an edge, used to score diagnoses."""
    edge: DEdge
    difference: int
