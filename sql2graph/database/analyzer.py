"""
Abstract analyzer interface for database systems.

This module defines the abstract base class that all database analyzers
must implement. Adapters supply the engine-specific catalog queries and
connection handling; schema assembly, sampling and row streaming are shared
and run over any DB-API 2.0 connection.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ..utils.environment import DatabaseConnectionError
from .models import (
    ColumnInfo,
    ForeignKeyInfo,
    SampleDataset,
    SchemaSnapshot,
    TableInfo,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 5
SAMPLE_POOL_SIZE = 1000
SAMPLE_TIMEOUT_SECONDS = 10
MAX_SAMPLE_STRING_LENGTH = 100
TRUNCATION_MARKER = "..."


def truncate_sample_value(value: Any) -> Any:
    """Cut long strings so sample payloads stay small."""
    if isinstance(value, str) and len(value) > MAX_SAMPLE_STRING_LENGTH:
        return value[:MAX_SAMPLE_STRING_LENGTH] + TRUNCATION_MARKER
    return value


def build_tables(rows: Sequence[Sequence[Any]]) -> List[TableInfo]:
    """
    Group catalog rows into tables.

    Rows must be ordered by schema, table and ordinal position and have the
    shape (schema, table, column, data_type, is_nullable, max_length,
    is_primary_key, ordinal_position).

    The primary key column is overwritten by every PK column seen, so a
    composite key ends up with its last column.
    """
    tables: List[TableInfo] = []
    current: Optional[TableInfo] = None

    for (
        schema_name,
        table_name,
        column_name,
        data_type,
        is_nullable,
        max_length,
        is_primary_key,
        ordinal_position,
    ) in rows:
        if (
            current is None
            or current.schema_name != schema_name
            or current.table_name != table_name
        ):
            current = TableInfo(schema_name=schema_name, table_name=table_name)
            tables.append(current)

        column = ColumnInfo(
            name=column_name,
            data_type=data_type,
            is_nullable=str(is_nullable).upper() == "YES",
            is_primary_key=bool(is_primary_key),
            max_length=int(max_length) if max_length is not None else None,
            ordinal_position=int(ordinal_position),
        )
        if column.is_primary_key:
            current.primary_key_column = column.name

        current.columns.append(column)

    return tables


def mark_foreign_key_columns(snapshot: SchemaSnapshot) -> List[ForeignKeyInfo]:
    """
    Set is_foreign_key on every column that is the source of a foreign key.

    Foreign keys whose source table or column cannot be found are skipped
    and reported with a warning.

    Returns:
        The foreign keys that could not be resolved
    """
    unresolved: List[ForeignKeyInfo] = []

    for fk in snapshot.foreign_keys:
        table = snapshot.find_table(fk.from_table)
        column = table.get_column(fk.from_column) if table else None
        if column is None:
            logger.warning(
                "Foreign key %s references unknown column %s.%s; skipping",
                fk.constraint_name,
                fk.from_table,
                fk.from_column,
            )
            unresolved.append(fk)
            continue
        column.is_foreign_key = True

    return unresolved


class DatabaseAnalyzer(ABC):
    """
    Abstract base class for database analyzers.

    All database-specific analyzers must implement this interface so the
    extraction, sampling and export components work regardless of the
    underlying database system.
    """

    def __init__(self, connection_config: Dict[str, Any]):
        """
        Initialize the database analyzer.

        Args:
            connection_config: Database-specific connection configuration
        """
        self.connection_config = connection_config
        self.connection = None
        self.last_error: Optional[str] = None
        self.database_type = self._get_database_type()

    @abstractmethod
    def _get_database_type(self) -> str:
        """Return the type of database (e.g., 'mysql', 'postgresql')."""
        pass

    @abstractmethod
    def connect(self) -> bool:
        """
        Establish connection to the database.

        Returns:
            True if connection successful, False otherwise
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the database connection."""
        pass

    @abstractmethod
    def get_tables_query(self) -> Tuple[str, tuple]:
        """
        Return the catalog query listing base tables and their columns.

        Result rows must match the shape expected by build_tables().
        """
        pass

    @abstractmethod
    def get_foreign_keys_query(self) -> Tuple[str, tuple]:
        """
        Return the catalog query listing foreign key column pairs.

        Result rows: (constraint, from_schema, from_table, from_column,
        to_schema, to_table, to_column), ordered by constraint name.
        """
        pass

    @abstractmethod
    def quote_identifier(self, identifier: str) -> str:
        """Quote a single identifier for this engine."""
        pass

    @abstractmethod
    def build_sample_query(self, table: TableInfo, sample_size: int) -> str:
        """Return the random sampling query for a table."""
        pass

    def get_database_name(self) -> str:
        return str(self.connection_config.get("database", "unknown"))

    def prepare_sample_query(
        self, cursor: Any, table: TableInfo, sample_size: int
    ) -> str:
        """Run per-query setup on the cursor and return the sampling query."""
        return self.build_sample_query(table, sample_size)

    def open_stream_cursor(self, batch_size: int) -> Any:
        """Cursor used to stream a whole table; adapters may return a server-side cursor."""
        return self._require_connection().cursor()

    def recover(self) -> None:
        """Reset the connection after a failed statement."""
        if self.connection is None:
            return
        try:
            self.connection.rollback()
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("Rollback after failed statement did not succeed: %s", e)

    def quote_table(self, table: TableInfo) -> str:
        return (
            f"{self.quote_identifier(table.schema_name)}."
            f"{self.quote_identifier(table.table_name)}"
        )

    @contextmanager
    def session(self) -> Iterator[Any]:
        """
        Open a connection for the duration of a block.

        Raises:
            DatabaseConnectionError: If the connection cannot be opened
        """
        if not self.connect():
            raise DatabaseConnectionError(
                f"Could not connect to {self.database_type} database "
                f"'{self.get_database_name()}': {self.last_error}"
            )
        try:
            yield self.connection
        finally:
            self.disconnect()

    def _require_connection(self) -> Any:
        if self.connection is None:
            raise ConnectionError("Not connected to database")
        return self.connection

    def _fetch_all(self, query: str, params: tuple = ()) -> List[Sequence[Any]]:
        cursor = self._require_connection().cursor()
        try:
            cursor.execute(query, params or None)
            return list(cursor.fetchall())
        finally:
            cursor.close()

    def test_connection(self) -> Tuple[bool, str]:
        """
        Try to open a connection without raising.

        Returns:
            Tuple of (success, human readable message)
        """
        try:
            if not self.connect():
                return False, self.last_error or "Failed to establish connection"
            self.disconnect()
            return True, f"Connected to {self.get_database_name()}"
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Connection test failed: %s", e)
            return False, str(e)

    def read_tables(self) -> List[TableInfo]:
        """Read base tables and their columns from the open connection."""
        query, params = self.get_tables_query()
        return build_tables(self._fetch_all(query, params))

    def read_foreign_keys(self) -> List[ForeignKeyInfo]:
        """Read all foreign key column pairs from the open connection."""
        query, params = self.get_foreign_keys_query()
        return [
            ForeignKeyInfo(
                constraint_name=constraint_name,
                from_table=f"{from_schema}.{from_table}",
                from_column=from_column,
                to_table=f"{to_schema}.{to_table}",
                to_column=to_column,
            )
            for (
                constraint_name,
                from_schema,
                from_table,
                from_column,
                to_schema,
                to_table,
                to_column,
            ) in self._fetch_all(query, params)
        ]

    def read_schema(self) -> SchemaSnapshot:
        """
        Extract a complete schema snapshot.

        Returns:
            SchemaSnapshot with tables, columns and foreign keys

        Raises:
            DatabaseConnectionError: If the source cannot be reached
        """
        with self.session():
            snapshot = SchemaSnapshot(
                database_name=self.get_database_name(),
                tables=self.read_tables(),
                foreign_keys=self.read_foreign_keys(),
            )

        mark_foreign_key_columns(snapshot)

        logger.info(
            "Read schema: %d tables, %d foreign keys",
            len(snapshot.tables),
            len(snapshot.foreign_keys),
        )
        return snapshot

    def sample_table(self, table: TableInfo, sample_size: int) -> List[Dict[str, Any]]:
        """Fetch a random sample of rows from one table."""
        cursor = self._require_connection().cursor()
        try:
            cursor.execute(self.prepare_sample_query(cursor, table, sample_size))
            columns = [description[0] for description in cursor.description]
            rows = cursor.fetchall()
        finally:
            cursor.close()

        return [
            {column: truncate_sample_value(value) for column, value in zip(columns, row)}
            for row in rows[:sample_size]
        ]

    def read_sample_data(
        self, tables: List[TableInfo], sample_size: int = DEFAULT_SAMPLE_SIZE
    ) -> SampleDataset:
        """
        Sample rows from each table.

        A table that cannot be sampled maps to an empty list and the
        remaining tables are still processed.

        Args:
            tables: Tables to sample from
            sample_size: Number of rows per table

        Returns:
            Dictionary of table full name to sampled rows
        """
        samples: SampleDataset = {}

        with self.session():
            for table in tables:
                try:
                    rows = self.sample_table(table, sample_size)
                except Exception as e:  # pylint: disable=broad-except
                    logger.warning("Failed to sample from %s: %s", table.full_name, e)
                    self.recover()
                    rows = []
                else:
                    logger.info("Sampled %d rows from %s", len(rows), table.full_name)
                samples[table.full_name] = rows

        return samples

    def stream_table_rows(
        self, table: TableInfo, batch_size: int = 1000
    ) -> Tuple[List[str], Iterator[Sequence[Any]]]:
        """
        Run an unfiltered query against a table on the open connection.

        Returns:
            Tuple of (column names, row iterator); the cursor is closed once
            the iterator is exhausted or closed
        """
        cursor = self.open_stream_cursor(batch_size)
        try:
            cursor.execute(f"SELECT * FROM {self.quote_table(table)}")
            # Server-side cursors describe their columns only after a fetch
            first_batch = cursor.fetchmany(batch_size)
            columns = [description[0] for description in cursor.description]
        except Exception:
            cursor.close()
            raise
        return columns, self._iter_rows(cursor, first_batch, batch_size)

    @staticmethod
    def _iter_rows(
        cursor: Any, batch: List[Sequence[Any]], batch_size: int
    ) -> Iterator[Sequence[Any]]:
        try:
            while batch:
                yield from batch
                batch = cursor.fetchmany(batch_size)
        finally:
            cursor.close()

    def is_connected(self) -> bool:
        """
        Check if the database connection is active.

        Returns:
            True if connected, False otherwise
        """
        return self.connection is not None

    def get_connection_info(self) -> Dict[str, Any]:
        """
        Get connection information (excluding sensitive data like passwords).

        Returns:
            Dictionary with connection information
        """
        safe_config = self.connection_config.copy()
        if "password" in safe_config:
            safe_config["password"] = "***"
        return {
            "database_type": self.database_type,
            "config": safe_config,
            "connected": self.is_connected(),
        }
