"""
Core graph modeling logic.

Strategies and the analysis service live in `core.strategies` and
`core.analysis`; this package only exposes the graph models and layout.
"""

from .models import (
    AnalysisResult,
    GraphModel,
    NodeType,
    PropertyMapping,
    RelationshipType,
)
from .layout import PALETTE, assign_node_layout

__all__ = [
    "AnalysisResult",
    "GraphModel",
    "NodeType",
    "PropertyMapping",
    "RelationshipType",
    "PALETTE",
    "assign_node_layout",
]
