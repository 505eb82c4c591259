"""
Contracts for the STN diagnosis layers.

All layers exchange only these types.
"""

from .base import ErrorCode, Error, Result, Interval, hull_of
from .network import Vertex, DEdge, Observation, InjectedFault, EdgeKey

__all__ = [
    "ErrorCode", "Error", "Result", "Interval", "hull_of",
    "Vertex", "DEdge", "Observation", "InjectedFault", "EdgeKey",
]
