"""Tests for CSV escaping and zip export."""

import csv
import io
import logging
import zipfile
from datetime import date, datetime
from decimal import Decimal

import pytest

from sql2graph.database.analyzer import build_tables
from sql2graph.database.models import TableInfo
from sql2graph.export import CsvExportService, escape_csv_field
from sql2graph.export.csv_export import format_row, format_value
from sql2graph.utils.environment import DatabaseConnectionError

from conftest import FakeAnalyzer, FakeConnection, select_all


@pytest.mark.parametrize(
    "field, expected",
    [
        (None, ""),
        ("", ""),
        ("plain", "plain"),
        ("a,b", '"a,b"'),
        ('say "hi"', '"say ""hi"""'),
        ("line\nbreak", '"line\nbreak"'),
        ("carriage\rreturn", '"carriage\rreturn"'),
    ],
)
def test_escape_csv_field(field, expected):
    assert escape_csv_field(field) == expected


@pytest.mark.parametrize(
    "field", ['He said "no", then left', "multi\nline, with comma", "tab\tonly"]
)
def test_escaped_field_parses_back(field):
    line = ",".join([escape_csv_field(field), escape_csv_field("tail")])

    assert next(csv.reader(io.StringIO(line))) == [field, "tail"]


def test_format_value():
    assert format_value(None) is None
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(Decimal("9.50")) == "9.50"
    assert format_value(b"\x01\xff") == "01ff"
    assert format_value(date(2024, 1, 31)) == "2024-01-31"
    assert format_value(datetime(2024, 1, 31, 8, 30)) == "2024-01-31T08:30:00"


def test_format_row_keeps_nulls_empty():
    assert format_row([1, None, "a,b", ""]) == '1,,"a,b",'


def _tables():
    return build_tables(
        [
            ("dbo", "Orders", "id", "int", "NO", None, 1, 1),
            ("dbo", "Products", "id", "int", "NO", None, 1, 1),
            ("dbo", "Users", "id", "int", "NO", None, 1, 1),
        ]
    )


def _read_archive(stream):
    with zipfile.ZipFile(stream) as archive:
        return {name: archive.read(name) for name in archive.namelist()}


class TestCsvExportService:
    def test_exports_each_table_to_its_own_entry(self):
        connection = FakeConnection(
            {
                select_all("dbo", "Orders"): (["id", "note"], [(1, "a,b"), (2, None)]),
                select_all("dbo", "Products"): (["id", "name"], [(7, "Café")]),
                select_all("dbo", "Users"): (["id", "active"], [(3, True)]),
            }
        )
        service = CsvExportService(FakeAnalyzer(connection), line_terminator="\r\n")

        entries = _read_archive(service.export_tables(_tables()))

        assert sorted(entries) == [
            "dbo_Orders.csv",
            "dbo_Products.csv",
            "dbo_Users.csv",
        ]
        assert entries["dbo_Orders.csv"] == b'id,note\r\n1,"a,b"\r\n2,\r\n'
        assert entries["dbo_Products.csv"] == "id,name\r\n7,Café\r\n".encode("utf-8")
        assert entries["dbo_Users.csv"] == b"id,active\r\n3,true\r\n"

    def test_entries_have_no_byte_order_mark(self):
        connection = FakeConnection({select_all("dbo", "Users"): (["name"], [("Zoë",)])})
        service = CsvExportService(FakeAnalyzer(connection), line_terminator="\n")
        users = _tables()[2]

        entries = _read_archive(service.export_tables([users]))

        assert not entries["dbo_Users.csv"].startswith(b"\xef\xbb\xbf")
        assert entries["dbo_Users.csv"].decode("utf-8") == "name\nZoë\n"

    def test_failing_table_does_not_stop_export(self, caplog):
        connection = FakeConnection(
            {
                select_all("dbo", "Orders"): (["id"], [(1,), (2,)]),
                select_all("dbo", "Products"): RuntimeError("permission denied"),
                select_all("dbo", "Users"): (["id"], [(3,)]),
            }
        )
        service = CsvExportService(FakeAnalyzer(connection), line_terminator="\n")

        with caplog.at_level(logging.ERROR):
            entries = _read_archive(service.export_tables(_tables()))

        assert len(entries) == 3
        assert entries["dbo_Orders.csv"] == b"id\n1\n2\n"
        assert entries["dbo_Products.csv"] == b""
        assert entries["dbo_Users.csv"] == b"id\n3\n"
        assert "dbo.Products" in caplog.text
        assert connection.rollbacks == 1

    def test_failure_while_reading_rows_keeps_written_rows(self):
        first_batch = [(i,) for i in range(1000)]
        connection = FakeConnection(
            {
                select_all("dbo", "Orders"): (["id"], first_batch + [RuntimeError("reset")]),
                select_all("dbo", "Users"): (["id"], [(3,)]),
            }
        )
        service = CsvExportService(FakeAnalyzer(connection), line_terminator="\n")
        orders, _, users = _tables()

        entries = _read_archive(service.export_tables([orders, users]))

        expected = "id\n" + "".join(f"{i}\n" for i in range(1000))
        assert entries["dbo_Orders.csv"] == expected.encode("utf-8")
        assert entries["dbo_Users.csv"] == b"id\n3\n"
        assert all(cursor.closed for cursor in connection.cursors)

    def test_writes_to_given_stream(self):
        connection = FakeConnection({})
        analyzer = FakeAnalyzer(connection)
        stream = io.BytesIO()

        result = CsvExportService(analyzer).export_tables([], stream)

        assert result is stream
        assert stream.tell() == 0
        assert _read_archive(stream) == {}
        assert analyzer.disconnect_calls == 1

    def test_connection_failure_raises(self):
        analyzer = FakeAnalyzer(FakeConnection({}), connect_error="refused")

        with pytest.raises(DatabaseConnectionError):
            CsvExportService(analyzer).export_tables(
                [TableInfo(schema_name="dbo", table_name="Users")]
            )
