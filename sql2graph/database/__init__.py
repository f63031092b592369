"""
Database analysis package interface.

This module provides the main entry point for schema extraction
functionality, importing and exposing all the necessary components.
"""

# Core data models
from .models import (
    ColumnInfo,
    ForeignKeyInfo,
    TableInfo,
    SchemaSnapshot,
    SampleDataset,
)

# Base interfaces
from .analyzer import DatabaseAnalyzer, mark_foreign_key_columns

# Factory
from .factory import DatabaseAnalyzerFactory

__all__ = [
    # Data models
    "ColumnInfo",
    "ForeignKeyInfo",
    "TableInfo",
    "SchemaSnapshot",
    "SampleDataset",
    # Interfaces
    "DatabaseAnalyzer",
    "mark_foreign_key_columns",
    # Factory
    "DatabaseAnalyzerFactory",
]
