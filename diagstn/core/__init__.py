"""
Core network model: graph structure and paths.
"""

from .graph import Graph, GraphMetrics
from .path import GraphPath

__all__ = ["Graph", "GraphMetrics", "GraphPath"]
