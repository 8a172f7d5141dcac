#!/usr/bin/env python3
"""
Tests for StatementRunner and RowMapper against SQLite
"""

import sqlite3
import unittest
from unittest.mock import MagicMock

from conftest import CountingConnection
from core.models import Table, TypeInfo
from core.sql_types import SQLType
from core.statement_runner import RowMapper, StatementRunner


class TestStatementRunner(unittest.TestCase):

    def setUp(self):
        self.conn = CountingConnection(sqlite3.connect(":memory:"))
        self.runner = StatementRunner()

    def tearDown(self):
        self.conn.close()

    def test_execute_update_commits(self):
        self.runner.execute_update("CREATE TABLE t (id INTEGER)", self.conn)
        affected = self.runner.execute_update("INSERT INTO t VALUES (1)", self.conn)
        self.assertEqual(affected, 1)
        self.assertEqual(self.conn.commits, 2)

    def test_execute_update_rolls_back_and_reraises(self):
        with self.assertRaises(sqlite3.OperationalError):
            self.runner.execute_update("CREATE TABLE (broken", self.conn)
        self.assertEqual(self.conn.commits, 0)
        self.assertEqual(self.conn.rollbacks, 1)

    def test_rollback_failure_is_not_raised(self):
        conn = MagicMock()
        conn.cursor.return_value.execute.side_effect = RuntimeError("boom")
        conn.rollback.side_effect = RuntimeError("connection lost")
        with self.assertRaisesRegex(RuntimeError, "boom"):
            self.runner.execute_update("DROP TABLE x", conn)

    def test_execute_scalar_query(self):
        self.conn.execute("CREATE TABLE t (id INTEGER)")
        self.conn.executemany("INSERT INTO t VALUES (?)", [(1,), (2,), (3,)])
        self.assertEqual(self.runner.execute_scalar_query("SELECT COUNT(*) FROM t", int, self.conn), [3])
        self.assertEqual(self.runner.execute_scalar_query("SELECT id FROM t ORDER BY id", str, self.conn),
                         ["1", "2", "3"])

    def test_query_maps_rows(self):
        tables = self.runner.query(
            "SELECT 'customers' AS TABLE_NAME, NULL AS CREATE_TIME, NULL AS UPDATE_TIME, 'crm' AS TABLE_COMMENT",
            Table, self.conn)
        self.assertEqual(tables, [Table(name='customers', comment='crm')])

    def test_cursor_closed_after_query(self):
        conn = MagicMock()
        cursor = conn.cursor.return_value
        cursor.fetchall.return_value = [(5,)]
        self.runner.execute_scalar_query("SELECT 5", int, conn)
        cursor.close.assert_called_once()


class TestRowMapper(unittest.TestCase):

    def setUp(self):
        self.mapper = RowMapper()

    def test_aliases_and_case(self):
        row = {'TYPE_NAME': 'VARCHAR', 'DATA_TYPE': 12, 'PRECISION': 255,
               'CREATE_PARAMS': '(M)', 'MINIMUM_SCALE': 0}
        info = self.mapper.map_row(row, TypeInfo)
        self.assertEqual(info, TypeInfo('VARCHAR', SQLType.VARCHAR, 255, '(M)', 0))

    def test_unknown_columns_ignored(self):
        table = self.mapper.map_row({'table_name': 't', 'engine': 'InnoDB'}, Table)
        self.assertEqual(table.name, 't')

    def test_missing_required_field(self):
        with self.assertRaises(ValueError):
            self.mapper.map_row({'comment': 'no name'}, Table)

    def test_map_from_cursor(self):
        conn = sqlite3.connect(":memory:")
        cursor = conn.execute("SELECT 'a' AS table_name UNION ALL SELECT 'b'")
        self.assertEqual([t.name for t in self.mapper.map(cursor, Table)], ['a', 'b'])
        conn.close()

    def test_dict_passthrough(self):
        rows = [{'A': 1}]
        self.assertEqual(self.mapper.map_rows(rows, dict), [{'A': 1}])

    def test_non_dataclass_rejected(self):
        with self.assertRaises(TypeError):
            self.mapper.map_rows([{'a': 1}], object)


if __name__ == '__main__':
    unittest.main()
