"""
Cypher query generation and schema naming utilities.
"""

from .cypher_generator import CypherGenerator, csv_file_name
from .schema_utilities import SchemaUtilities

__all__ = [
    "CypherGenerator",
    "SchemaUtilities",
    "csv_file_name",
]
