"""
Database adapter implementations for different database systems.
"""

from .mysql import MySQLAnalyzer
from .postgresql import PostgreSQLAnalyzer

__all__ = [
    "MySQLAnalyzer",
    "PostgreSQLAnalyzer",
]
