#!/usr/bin/env python3
"""
SQLSync PostgreSQL Dialect

PostgreSQL through psycopg2. Tables are looked up in current_schema();
unquoted identifiers fold to lower case, so table names are matched
case-insensitively.
"""

import logging
from typing import Optional

from core.models import ConnectionDescriptor, Credential
from core.sql_text import quote_literal
from core.sql_types import SQLType
from extensions.dialects.base import Dialect

logger = logging.getLogger(__name__)


class PostgreSQLDialect(Dialect):
    """PostgreSQL dialect"""

    name = "postgresql"
    scheme = "postgresql"
    driver = "psycopg2"
    default_port = 5432

    type_catalog_rows = [
        ("bool", SQLType.BIT, 1, "", 0),
        ("int8", SQLType.BIGINT, 19, "", 0),
        ("bytea", SQLType.LONGVARBINARY, 1073741823, "", 0),
        ("bytea", SQLType.VARBINARY, 1073741823, "", 0),
        ("bytea", SQLType.BINARY, 1073741823, "", 0),
        ("text", SQLType.LONGVARCHAR, 1073741823, "", 0),
        ("text", SQLType.LONGNVARCHAR, 1073741823, "", 0),
        ("char", SQLType.CHAR, 10485760, "(M)", 0),
        ("char", SQLType.NCHAR, 10485760, "(M)", 0),
        ("numeric", SQLType.NUMERIC, 1000, "(M,D)", 0),
        ("numeric", SQLType.DECIMAL, 1000, "(M,D)", 0),
        ("int4", SQLType.INTEGER, 10, "", 0),
        ("int2", SQLType.SMALLINT, 5, "", 0),
        ("int2", SQLType.TINYINT, 5, "", 0),
        ("float4", SQLType.REAL, 8, "", 0),
        ("float8", SQLType.FLOAT, 17, "", 0),
        ("float8", SQLType.DOUBLE, 17, "", 0),
        ("varchar", SQLType.VARCHAR, 10485760, "(M)", 0),
        ("varchar", SQLType.NVARCHAR, 10485760, "(M)", 0),
        ("bool", SQLType.BOOLEAN, 1, "", 0),
        ("date", SQLType.DATE, 13, "", 0),
        ("time", SQLType.TIME, 15, "", 0),
        ("timestamp", SQLType.TIMESTAMP, 29, "", 0),
        ("timestamptz", SQLType.TIMESTAMP_WITH_TIMEZONE, 35, "", 0),
        ("timetz", SQLType.TIME_WITH_TIMEZONE, 21, "", 0),
        ("bytea", SQLType.BLOB, 1073741823, "", 0),
        ("text", SQLType.CLOB, 1073741823, "", 0),
        ("text", SQLType.NCLOB, 1073741823, "", 0),
    ]

    def table_list_query(self, database: str) -> str:
        return """
            SELECT c.relname AS TABLE_NAME,
                   NULL AS CREATE_TIME,
                   NULL AS UPDATE_TIME,
                   obj_description(c.oid, 'pg_class') AS TABLE_COMMENT
            FROM pg_catalog.pg_class c
            JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
            WHERE n.nspname = current_schema()
            AND c.relkind IN ('r', 'p')
            ORDER BY c.relname
        """

    def column_list_query(self, database: str, table: str) -> str:
        return f"""
            SELECT column_name AS COLUMN_NAME,
                   data_type AS TYPE_NAME,
                   COALESCE(character_maximum_length, numeric_precision, datetime_precision, 0) AS COLUMN_SIZE,
                   COALESCE(numeric_scale, 0) AS DECIMAL_DIGITS
            FROM information_schema.columns
            WHERE table_schema = current_schema()
            AND table_name = LOWER({quote_literal(table)})
            ORDER BY ordinal_position
        """

    def page_clause(self, sql: str, page_no: int, page_size: Optional[int] = None) -> str:
        """Window sql with LIMIT/OFFSET.

        Each page is a separate query and sql carries no ORDER BY, so the
        server may return rows in a different order per page (on PostgreSQL,
        synchronized sequential scans on large tables).
        """
        offset, size = self._page_window(page_no, page_size)
        return f"{sql} LIMIT {size} OFFSET {offset}"

    def blob_type_name(self) -> str:
        return "BYTEA"

    def install_hint(self) -> str:
        return "psycopg2-binary"

    def _open(self, driver, descriptor: ConnectionDescriptor, credential: Credential):
        return driver.connect(
            host=descriptor.host or "localhost",
            port=int(descriptor.port or self.default_port),
            user=credential.user,
            password=credential.password,
            dbname=descriptor.database,
            connect_timeout=10,
        )
