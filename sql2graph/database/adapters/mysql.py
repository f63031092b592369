"""
MySQL-specific database analyzer implementation.

This module provides MySQL-specific implementation of the DatabaseAnalyzer interface.
"""

import logging
from typing import Tuple

import mysql.connector

from ..analyzer import (
    DatabaseAnalyzer,
    SAMPLE_POOL_SIZE,
    SAMPLE_TIMEOUT_SECONDS,
)
from ..models import TableInfo

logger = logging.getLogger(__name__)

TABLES_QUERY = """
SELECT
    t.TABLE_SCHEMA,
    t.TABLE_NAME,
    c.COLUMN_NAME,
    c.DATA_TYPE,
    c.IS_NULLABLE,
    c.CHARACTER_MAXIMUM_LENGTH,
    CASE WHEN pk.COLUMN_NAME IS NOT NULL THEN 1 ELSE 0 END AS IS_PRIMARY_KEY,
    c.ORDINAL_POSITION
FROM information_schema.TABLES t
INNER JOIN information_schema.COLUMNS c
    ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
LEFT JOIN (
    SELECT ku.TABLE_SCHEMA, ku.TABLE_NAME, ku.COLUMN_NAME
    FROM information_schema.TABLE_CONSTRAINTS tc
    INNER JOIN information_schema.KEY_COLUMN_USAGE ku
        ON tc.CONSTRAINT_SCHEMA = ku.CONSTRAINT_SCHEMA
        AND tc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
        AND tc.TABLE_NAME = ku.TABLE_NAME
    WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY'
) pk ON c.TABLE_SCHEMA = pk.TABLE_SCHEMA
    AND c.TABLE_NAME = pk.TABLE_NAME
    AND c.COLUMN_NAME = pk.COLUMN_NAME
WHERE t.TABLE_TYPE = 'BASE TABLE'
    AND t.TABLE_SCHEMA = %s
ORDER BY t.TABLE_SCHEMA, t.TABLE_NAME, c.ORDINAL_POSITION
"""

FOREIGN_KEYS_QUERY = """
SELECT
    CONSTRAINT_NAME,
    TABLE_SCHEMA,
    TABLE_NAME,
    COLUMN_NAME,
    REFERENCED_TABLE_SCHEMA,
    REFERENCED_TABLE_NAME,
    REFERENCED_COLUMN_NAME
FROM information_schema.KEY_COLUMN_USAGE
WHERE REFERENCED_TABLE_NAME IS NOT NULL
    AND TABLE_SCHEMA = %s
ORDER BY CONSTRAINT_NAME, ORDINAL_POSITION
"""


class MySQLAnalyzer(DatabaseAnalyzer):
    """MySQL-specific implementation of DatabaseAnalyzer."""

    def __init__(
        self, host: str, user: str, password: str, database: str, port: int = 3306
    ):
        """
        Initialize MySQL analyzer.

        Args:
            host: MySQL server hostname
            user: MySQL username
            password: MySQL password
            database: Database name
            port: MySQL port (default: 3306)
        """
        connection_config = {
            "host": host,
            "user": user,
            "password": password,
            "database": database,
            "port": port,
        }
        super().__init__(connection_config)

    def _get_database_type(self) -> str:
        """Return the database type."""
        return "mysql"

    def connect(self) -> bool:
        """Establish connection to MySQL database."""
        try:
            # Unread rows of an abandoned export must not block the next query
            self.connection = mysql.connector.connect(
                **self.connection_config, consume_results=True
            )
            self.last_error = None
            logger.info("Successfully connected to MySQL database")
            return True
        except mysql.connector.Error as e:
            logger.error("Error connecting to MySQL: %s", e)
            self.connection = None
            self.last_error = str(e)
            return False

    def disconnect(self) -> None:
        """Close MySQL connection."""
        if self.connection and self.connection.is_connected():
            self.connection.close()
            logger.info("MySQL connection closed")
        self.connection = None

    def get_tables_query(self) -> Tuple[str, tuple]:
        return TABLES_QUERY, (self.get_database_name(),)

    def get_foreign_keys_query(self) -> Tuple[str, tuple]:
        return FOREIGN_KEYS_QUERY, (self.get_database_name(),)

    def quote_identifier(self, identifier: str) -> str:
        return "`" + identifier.replace("`", "``") + "`"

    def build_sample_query(self, table: TableInfo, sample_size: int) -> str:
        """
        Random sample drawn from a bounded pool of rows.

        MySQL has no TABLESAMPLE, so the pool is capped with an inner LIMIT
        before ORDER BY RAND() to avoid sorting the whole table.
        """
        timeout_ms = SAMPLE_TIMEOUT_SECONDS * 1000
        return (
            f"SELECT /*+ MAX_EXECUTION_TIME({timeout_ms}) */ * "
            f"FROM (SELECT * FROM {self.quote_table(table)} "
            f"LIMIT {SAMPLE_POOL_SIZE}) AS sample_pool "
            f"ORDER BY RAND() LIMIT {int(sample_size)}"
        )
