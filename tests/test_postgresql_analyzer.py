"""Unit tests for PostgreSQLAnalyzer class."""

import unittest
from unittest.mock import Mock, patch

import psycopg2

from sql2graph.database.adapters.postgresql import PostgreSQLAnalyzer
from sql2graph.database.models import TableInfo


class TestPostgreSQLAnalyzer(unittest.TestCase):
    """Test cases for PostgreSQLAnalyzer class."""

    def setUp(self):
        self.analyzer = PostgreSQLAnalyzer(
            host="localhost",
            user="postgres",
            password="secret",
            database="shop",
        )

    def test_init(self):
        self.assertEqual(self.analyzer.connection_config["port"], 5432)
        self.assertNotIn("schema", self.analyzer.connection_config)
        self.assertEqual(self.analyzer.database_type, "postgresql")

    @patch("sql2graph.database.adapters.postgresql.psycopg2.connect")
    def test_connect_success(self, mock_connect):
        mock_connection = Mock()
        mock_connect.return_value = mock_connection

        self.assertTrue(self.analyzer.connect())
        self.assertEqual(self.analyzer.connection, mock_connection)
        mock_connect.assert_called_once_with(**self.analyzer.connection_config)

    @patch("sql2graph.database.adapters.postgresql.psycopg2.connect")
    def test_connect_failure(self, mock_connect):
        mock_connect.side_effect = psycopg2.OperationalError("could not connect\n")

        self.assertFalse(self.analyzer.connect())
        self.assertIsNone(self.analyzer.connection)
        self.assertEqual(self.analyzer.last_error, "could not connect")

    def test_disconnect(self):
        mock_connection = Mock()
        setattr(self.analyzer, "connection", mock_connection)

        self.analyzer.disconnect()

        mock_connection.close.assert_called_once()
        self.assertIsNone(self.analyzer.connection)

    def test_queries_without_schema_filter(self):
        tables_query, tables_params = self.analyzer.get_tables_query()
        fk_query, fk_params = self.analyzer.get_foreign_keys_query()

        self.assertEqual(tables_params, ())
        self.assertEqual(fk_params, ())
        self.assertNotIn("{schema_filter}", tables_query)
        self.assertNotIn("%s", tables_query)
        self.assertIn("unnest(con.conkey, con.confkey)", fk_query)

    def test_queries_with_schema_filter(self):
        analyzer = PostgreSQLAnalyzer(
            host="localhost",
            user="postgres",
            password="secret",
            database="shop",
            schema="sales",
        )

        tables_query, tables_params = analyzer.get_tables_query()
        fk_query, fk_params = analyzer.get_foreign_keys_query()

        self.assertIn("AND t.table_schema = %s", tables_query)
        self.assertEqual(tables_params, ("sales",))
        self.assertIn("AND src_ns.nspname = %s", fk_query)
        self.assertEqual(fk_params, ("sales",))

    def test_quote_identifier(self):
        self.assertEqual(self.analyzer.quote_identifier("Orders"), '"Orders"')
        self.assertEqual(self.analyzer.quote_identifier('a"b'), '"a""b"')

    def test_sample_table_uses_tablesample(self):
        table = TableInfo(schema_name="public", table_name="users")
        cursor = Mock()
        cursor.description = [("id",), ("name",)]
        cursor.fetchone.return_value = (50000.0,)
        cursor.fetchall.return_value = [(1, "Ada")]
        mock_connection = Mock()
        mock_connection.cursor.return_value = cursor
        setattr(self.analyzer, "connection", mock_connection)

        rows = self.analyzer.sample_table(table, 5)

        self.assertEqual(rows, [{"id": 1, "name": "Ada"}])
        timeout_call, estimate_call, sample_call = cursor.execute.call_args_list
        self.assertEqual(timeout_call.args[0], "SET LOCAL statement_timeout = 10000")
        self.assertEqual(estimate_call.args[1], ('"public"."users"',))
        self.assertEqual(
            sample_call.args[0],
            'SELECT * FROM "public"."users" TABLESAMPLE SYSTEM (2) '
            "ORDER BY random() LIMIT 5",
        )
        cursor.close.assert_called_once()

    def test_build_sample_query_samples_whole_table_by_default(self):
        query = self.analyzer.build_sample_query(TableInfo("public", "big"), 5)

        self.assertIn('"public"."big" TABLESAMPLE SYSTEM (100)', query)
        self.assertNotIn("LIMIT 1000", query)

    def test_estimate_sample_percent(self):
        table = TableInfo(schema_name="public", table_name="big")
        cursor = Mock()

        for estimate, expected in [
            ((4000000.0,), 0.025),
            ((800.0,), 100.0),
            ((-1.0,), 100.0),
            (None, 100.0),
        ]:
            cursor.fetchone.return_value = estimate
            self.assertAlmostEqual(
                self.analyzer.estimate_sample_percent(cursor, table), expected
            )

    def test_stream_table_rows_uses_named_cursor(self):
        table = TableInfo(schema_name="public", table_name="users")
        cursor = Mock()
        cursor.description = [("id",), ("name",)]
        cursor.fetchmany.side_effect = [[(1, "Ada")], [(2, "Grace")], []]
        mock_connection = Mock()
        mock_connection.cursor.return_value = cursor
        setattr(self.analyzer, "connection", mock_connection)

        columns, rows = self.analyzer.stream_table_rows(table, batch_size=500)

        self.assertEqual(columns, ["id", "name"])
        self.assertEqual(list(rows), [(1, "Ada"), (2, "Grace")])
        cursor_kwargs = mock_connection.cursor.call_args.kwargs
        self.assertTrue(cursor_kwargs["name"].startswith("sql2graph_export_"))
        self.assertFalse(cursor_kwargs["withhold"])
        self.assertEqual(cursor.itersize, 500)
        cursor.fetchmany.assert_called_with(500)
        cursor.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
