#!/usr/bin/env python3
"""
SQLSync SQLite Dialect

SQLite databases are files; the descriptor's database is the file path
(or ':memory:'), host/port/credential are ignored.
"""

import logging
from typing import Optional

from core.models import ConnectionDescriptor, Credential
from core.sql_text import quote_literal
from core.sql_types import SQLType
from extensions.dialects.base import Dialect

logger = logging.getLogger(__name__)


class SQLiteDialect(Dialect):
    """SQLite dialect (stdlib sqlite3 driver)"""

    name = "sqlite"
    scheme = "sqlite"
    driver = "sqlite3"

    type_catalog_rows = [
        ("BOOLEAN", SQLType.BIT, 1, "", 0),
        ("INTEGER", SQLType.TINYINT, 3, "", 0),
        ("INTEGER", SQLType.BIGINT, 19, "", 0),
        ("BLOB", SQLType.LONGVARBINARY, 0, "", 0),
        ("BLOB", SQLType.VARBINARY, 0, "", 0),
        ("BLOB", SQLType.BINARY, 0, "", 0),
        ("TEXT", SQLType.LONGVARCHAR, 0, "", 0),
        ("TEXT", SQLType.LONGNVARCHAR, 0, "", 0),
        ("CHAR", SQLType.CHAR, 255, "(M)", 0),
        ("NCHAR", SQLType.NCHAR, 255, "(M)", 0),
        ("NUMERIC", SQLType.NUMERIC, 38, "(M,D)", 0),
        ("DECIMAL", SQLType.DECIMAL, 38, "(M,D)", 0),
        ("INTEGER", SQLType.INTEGER, 10, "", 0),
        ("INTEGER", SQLType.SMALLINT, 5, "", 0),
        ("REAL", SQLType.FLOAT, 15, "", 0),
        ("REAL", SQLType.REAL, 7, "", 0),
        ("REAL", SQLType.DOUBLE, 15, "", 0),
        ("VARCHAR", SQLType.VARCHAR, 255, "(M)", 0),
        ("NVARCHAR", SQLType.NVARCHAR, 255, "(M)", 0),
        ("BOOLEAN", SQLType.BOOLEAN, 1, "", 0),
        ("DATE", SQLType.DATE, 10, "", 0),
        ("TIME", SQLType.TIME, 8, "", 0),
        ("TIMESTAMP", SQLType.TIMESTAMP, 26, "", 0),
        ("TIMESTAMP", SQLType.TIMESTAMP_WITH_TIMEZONE, 32, "", 0),
        ("BLOB", SQLType.BLOB, 0, "", 0),
        ("TEXT", SQLType.CLOB, 0, "", 0),
        ("TEXT", SQLType.NCLOB, 0, "", 0),
    ]

    def build_connection_url(self, host: Optional[str], port: Optional[int], database: str) -> str:
        return f"sqlite:///{database}"

    def table_list_query(self, database: str) -> str:
        return """
            SELECT name AS TABLE_NAME,
                   NULL AS CREATE_TIME,
                   NULL AS UPDATE_TIME,
                   NULL AS TABLE_COMMENT
            FROM sqlite_master
            WHERE type = 'table'
            AND name NOT LIKE 'sqlite_%'
            ORDER BY name
        """

    def column_list_query(self, database: str, table: str) -> str:
        # Size and scale live inside the declared type, e.g. VARCHAR(50)
        return f"""
            SELECT name AS COLUMN_NAME,
                   type AS TYPE_NAME,
                   0 AS COLUMN_SIZE,
                   0 AS DECIMAL_DIGITS
            FROM pragma_table_info({quote_literal(table)})
            ORDER BY cid
        """

    def page_clause(self, sql: str, page_no: int, page_size: Optional[int] = None) -> str:
        """Window sql with LIMIT/OFFSET.

        Each page is a separate query and sql carries no ORDER BY, so the
        server may return rows in a different order per page (on PostgreSQL,
        synchronized sequential scans on large tables).
        """
        offset, size = self._page_window(page_no, page_size)
        return f"{sql} LIMIT {size} OFFSET {offset}"

    def placeholder(self, index: int) -> str:
        return "?"

    def _open(self, driver, descriptor: ConnectionDescriptor, credential: Credential):
        return driver.connect(descriptor.database, timeout=30.0, check_same_thread=False)

    def set_manual_commit(self, connection) -> None:
        # DML opens an implicit transaction that lasts until commit()
        connection.isolation_level = "DEFERRED"
