"""PostgreSQL-specific database analyzer implementation."""

import logging
import uuid
from typing import Any, Optional, Tuple

import psycopg2

from ..analyzer import (
    DatabaseAnalyzer,
    SAMPLE_POOL_SIZE,
    SAMPLE_TIMEOUT_SECONDS,
)
from ..models import TableInfo

logger = logging.getLogger(__name__)

TABLES_QUERY = """
SELECT
    t.table_schema,
    t.table_name,
    c.column_name,
    c.data_type,
    c.is_nullable,
    c.character_maximum_length,
    CASE WHEN pk.column_name IS NOT NULL THEN 1 ELSE 0 END AS is_primary_key,
    c.ordinal_position
FROM information_schema.tables t
JOIN information_schema.columns c
  ON t.table_schema = c.table_schema AND t.table_name = c.table_name
LEFT JOIN (
    SELECT kcu.table_schema, kcu.table_name, kcu.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
      ON tc.constraint_schema = kcu.constraint_schema
     AND tc.constraint_name = kcu.constraint_name
     AND tc.table_name = kcu.table_name
    WHERE tc.constraint_type = 'PRIMARY KEY'
) pk ON c.table_schema = pk.table_schema
    AND c.table_name = pk.table_name
    AND c.column_name = pk.column_name
WHERE t.table_type = 'BASE TABLE'
  AND t.table_schema NOT IN ('pg_catalog', 'information_schema')
  {schema_filter}
ORDER BY t.table_schema, t.table_name, c.ordinal_position
"""

# information_schema hides constraints on tables the user does not own,
# pg_catalog does not
FOREIGN_KEYS_QUERY = """
SELECT
    con.conname,
    src_ns.nspname,
    src.relname,
    src_att.attname,
    tgt_ns.nspname,
    tgt.relname,
    tgt_att.attname
FROM pg_constraint con
JOIN pg_class src ON src.oid = con.conrelid
JOIN pg_namespace src_ns ON src_ns.oid = src.relnamespace
JOIN pg_class tgt ON tgt.oid = con.confrelid
JOIN pg_namespace tgt_ns ON tgt_ns.oid = tgt.relnamespace
CROSS JOIN LATERAL unnest(con.conkey, con.confkey) AS k(src_attnum, tgt_attnum)
JOIN pg_attribute src_att
  ON src_att.attrelid = con.conrelid AND src_att.attnum = k.src_attnum
JOIN pg_attribute tgt_att
  ON tgt_att.attrelid = con.confrelid AND tgt_att.attnum = k.tgt_attnum
WHERE con.contype = 'f'
  AND src_ns.nspname NOT IN ('pg_catalog', 'information_schema')
  {schema_filter}
ORDER BY con.conname
"""

ROW_ESTIMATE_QUERY = "SELECT reltuples FROM pg_class WHERE oid = to_regclass(%s)"


class PostgreSQLAnalyzer(DatabaseAnalyzer):
    """PostgreSQL-specific implementation of DatabaseAnalyzer."""

    def __init__(
        self,
        host: str,
        user: str,
        password: str,
        database: str,
        port: int = 5432,
        schema: Optional[str] = None,
    ):
        connection_config = {
            "host": host,
            "user": user,
            "password": password,
            "database": database,
            "port": port,
        }
        self._schema = schema
        super().__init__(connection_config)

    def _get_database_type(self) -> str:
        return "postgresql"

    def connect(self) -> bool:
        try:
            self.connection = psycopg2.connect(**self.connection_config)
            self.last_error = None
            logger.info("Successfully connected to PostgreSQL database")
            return True
        except psycopg2.Error as exc:
            logger.error("Error connecting to PostgreSQL: %s", exc)
            self.connection = None
            self.last_error = str(exc).strip()
            return False

    def disconnect(self) -> None:
        if self.connection:
            self.connection.close()
            self.connection = None
            logger.info("PostgreSQL connection closed")

    def get_tables_query(self) -> Tuple[str, tuple]:
        if self._schema:
            return (
                TABLES_QUERY.format(schema_filter="AND t.table_schema = %s"),
                (self._schema,),
            )
        return TABLES_QUERY.format(schema_filter=""), ()

    def get_foreign_keys_query(self) -> Tuple[str, tuple]:
        if self._schema:
            return (
                FOREIGN_KEYS_QUERY.format(schema_filter="AND src_ns.nspname = %s"),
                (self._schema,),
            )
        return FOREIGN_KEYS_QUERY.format(schema_filter=""), ()

    def quote_identifier(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'

    def prepare_sample_query(
        self, cursor: Any, table: TableInfo, sample_size: int
    ) -> str:
        # SET LOCAL lasts until the surrounding transaction ends
        cursor.execute(
            f"SET LOCAL statement_timeout = {SAMPLE_TIMEOUT_SECONDS * 1000}"
        )
        return self.build_sample_query(
            table, sample_size, self.estimate_sample_percent(cursor, table)
        )

    def estimate_sample_percent(self, cursor: Any, table: TableInfo) -> float:
        """
        Percentage of pages to sample for a pool of about SAMPLE_POOL_SIZE rows.

        Uses the planner estimate in pg_class.reltuples, which is -1 for tables
        that were never analyzed; those are sampled in full.
        """
        cursor.execute(ROW_ESTIMATE_QUERY, (self.quote_table(table),))
        row = cursor.fetchone()
        estimate = float(row[0]) if row and row[0] is not None else -1.0
        if estimate <= SAMPLE_POOL_SIZE:
            return 100.0
        return SAMPLE_POOL_SIZE * 100.0 / estimate

    def build_sample_query(
        self, table: TableInfo, sample_size: int, percent: float = 100.0
    ) -> str:
        return (
            f"SELECT * FROM {self.quote_table(table)} "
            f"TABLESAMPLE SYSTEM ({percent:g}) "
            f"ORDER BY random() LIMIT {int(sample_size)}"
        )

    def open_stream_cursor(self, batch_size: int) -> Any:
        # Named cursors live on the server, so rows arrive in itersize batches
        cursor = self._require_connection().cursor(
            name=f"sql2graph_export_{uuid.uuid4().hex}", withhold=False
        )
        cursor.itersize = batch_size
        return cursor
