"""
Bulk CSV export of source tables.

Each table is written to its own CSV entry of a single zip archive, named
`<schema>_<table>.csv`, for use by the generated LOAD CSV script.
"""

import io
import logging
import os
import zipfile
from datetime import date, datetime, time
from typing import Any, BinaryIO, Iterable, List, Optional

from ..database.analyzer import DatabaseAnalyzer
from ..database.models import TableInfo
from ..query_generation.cypher_generator import csv_file_name

logger = logging.getLogger(__name__)

_SPECIAL_CHARACTERS = (",", '"', "\n", "\r")


def escape_csv_field(field: Optional[str]) -> str:
    """
    Escape one CSV field.

    The field is quoted, with inner quotes doubled, only when it contains a
    comma, a quote or a line break. None and "" become an empty field.
    """
    if not field:
        return ""
    if any(character in field for character in _SPECIAL_CHARACTERS):
        return '"' + field.replace('"', '""') + '"'
    return field


def format_value(value: Any) -> Optional[str]:
    """Render a database value as CSV text; None stays None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def format_row(values: Iterable[Any]) -> str:
    return ",".join(escape_csv_field(format_value(value)) for value in values)


class CsvExportService:
    """Exports table rows to a zip archive of CSV files."""

    def __init__(self, analyzer: DatabaseAnalyzer, line_terminator: str = os.linesep):
        self.analyzer = analyzer
        self.line_terminator = line_terminator

    def export_tables(
        self, tables: List[TableInfo], stream: Optional[BinaryIO] = None
    ) -> BinaryIO:
        """
        Export every table into one zip archive.

        A failing table is logged and keeps whatever was written before the
        failure; the remaining tables are still exported.

        Args:
            tables: Tables to export
            stream: Optional writable binary stream, defaults to an in-memory buffer

        Returns:
            The archive stream positioned at its start (when seekable)

        Raises:
            DatabaseConnectionError: If the source cannot be reached
        """
        output = stream if stream is not None else io.BytesIO()
        exported = 0

        with self.analyzer.session(), zipfile.ZipFile(
            output, mode="w", compression=zipfile.ZIP_DEFLATED
        ) as archive:
            for table in tables:
                with archive.open(csv_file_name(table), mode="w") as entry:
                    # No BOM: plain utf-8, not utf-8-sig
                    writer = io.TextIOWrapper(
                        entry, encoding="utf-8", newline=""
                    )
                    try:
                        self._write_table(table, writer)
                        exported += 1
                    except Exception:  # pylint: disable=broad-except
                        logger.exception("Error exporting table %s", table.full_name)
                        self.analyzer.recover()
                    finally:
                        writer.flush()
                        writer.detach()

        logger.info("Exported %d of %d tables", exported, len(tables))

        if output.seekable():
            output.seek(0)
        return output

    def _write_table(self, table: TableInfo, writer: io.TextIOWrapper) -> None:
        columns, rows = self.analyzer.stream_table_rows(table)
        count = 0
        try:
            writer.write(format_row(columns) + self.line_terminator)
            for row in rows:
                writer.write(format_row(row) + self.line_terminator)
                count += 1
        finally:
            rows.close()

        logger.info("Exported %d rows from %s", count, table.full_name)
