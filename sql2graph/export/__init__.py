"""
Bulk export of source tables for the generated load scripts.
"""

from .csv_export import CsvExportService, escape_csv_field

__all__ = [
    "CsvExportService",
    "escape_csv_field",
]
