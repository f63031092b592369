"""Shared fakes for analyzer, sampling and export tests."""

from typing import Any, Dict, List, Sequence, Tuple

import pytest

from sql2graph.database.analyzer import DatabaseAnalyzer
from sql2graph.database.models import (
    ColumnInfo,
    ForeignKeyInfo,
    SchemaSnapshot,
    TableInfo,
)

TABLES_QUERY = "TABLES"
FOREIGN_KEYS_QUERY = "FOREIGN KEYS"


class FakeCursor:
    """DB-API cursor returning canned results keyed by query text.

    A result is either an exception (raised by execute) or a tuple of
    (column names, rows); an exception inside rows is raised when fetched.
    """

    def __init__(self, results: Dict[str, Any]):
        self.results = results
        self.description = None
        self.executed: List[str] = []
        self.closed = False
        self._rows: List[Any] = []

    def execute(self, query: str, params: Any = None) -> None:
        self.executed.append(query)
        result = self.results.get(query, ([], []))
        if isinstance(result, Exception):
            raise result
        columns, rows = result
        self.description = [(column,) for column in columns]
        self._rows = list(rows)

    def fetchmany(self, size: int = 1) -> List[Sequence[Any]]:
        batch = []
        while self._rows and len(batch) < size:
            row = self._rows.pop(0)
            if isinstance(row, Exception):
                raise row
            batch.append(row)
        return batch

    def fetchall(self) -> List[Sequence[Any]]:
        return self.fetchmany(len(self._rows))

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, results: Dict[str, Any]):
        self.results = results
        self.cursors: List[FakeCursor] = []
        self.rollbacks = 0

    def cursor(self) -> FakeCursor:
        cursor = FakeCursor(self.results)
        self.cursors.append(cursor)
        return cursor

    def rollback(self) -> None:
        self.rollbacks += 1

    @property
    def executed(self) -> List[str]:
        return [query for cursor in self.cursors for query in cursor.executed]


class FakeAnalyzer(DatabaseAnalyzer):
    """Analyzer over a FakeConnection with trivial SQL."""

    def __init__(self, connection: FakeConnection, connect_error: str = ""):
        self._fake_connection = connection
        self._connect_error = connect_error
        self.connect_calls = 0
        self.disconnect_calls = 0
        super().__init__({"database": "shop", "password": "secret"})

    def _get_database_type(self) -> str:
        return "fake"

    def connect(self) -> bool:
        self.connect_calls += 1
        if self._connect_error:
            self.last_error = self._connect_error
            return False
        self.connection = self._fake_connection
        return True

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connection = None

    def get_tables_query(self) -> Tuple[str, tuple]:
        return TABLES_QUERY, ()

    def get_foreign_keys_query(self) -> Tuple[str, tuple]:
        return FOREIGN_KEYS_QUERY, ()

    def quote_identifier(self, identifier: str) -> str:
        return f'"{identifier}"'

    def build_sample_query(self, table: TableInfo, sample_size: int) -> str:
        return f"SAMPLE {self.quote_table(table)}"


def select_all(schema: str, table: str) -> str:
    return f'SELECT * FROM "{schema}"."{table}"'


def sample_query(schema: str, table: str) -> str:
    return f'SAMPLE "{schema}"."{table}"'


# (schema, table, column, data_type, is_nullable, max_length, is_pk, ordinal)
USERS_ORDERS_COLUMN_ROWS = [
    ("dbo", "Orders", "id", "int", "NO", None, 1, 1),
    ("dbo", "Orders", "user_id", "int", "NO", None, 0, 2),
    ("dbo", "Orders", "amount", "decimal", "YES", None, 0, 3),
    ("dbo", "Users", "id", "int", "NO", None, 1, 1),
    ("dbo", "Users", "name", "varchar", "YES", 100, 0, 2),
]

USERS_ORDERS_FK_ROWS = [
    ("FK_Orders_Users", "dbo", "Orders", "user_id", "dbo", "Users", "id"),
]


@pytest.fixture
def users_orders_snapshot() -> SchemaSnapshot:
    """Snapshot as produced by extraction for dbo.Users / dbo.Orders."""
    users = TableInfo(
        schema_name="dbo",
        table_name="Users",
        columns=[
            ColumnInfo("id", "int", False, is_primary_key=True, ordinal_position=1),
            ColumnInfo("name", "varchar", True, max_length=100, ordinal_position=2),
        ],
        primary_key_column="id",
    )
    orders = TableInfo(
        schema_name="dbo",
        table_name="Orders",
        columns=[
            ColumnInfo("id", "int", False, is_primary_key=True, ordinal_position=1),
            ColumnInfo(
                "user_id", "int", False, is_foreign_key=True, ordinal_position=2
            ),
            ColumnInfo("amount", "decimal", True, ordinal_position=3),
        ],
        primary_key_column="id",
    )
    return SchemaSnapshot(
        database_name="shop",
        tables=[orders, users],
        foreign_keys=[
            ForeignKeyInfo("FK_Orders_Users", "dbo.Orders", "user_id", "dbo.Users", "id")
        ],
    )
