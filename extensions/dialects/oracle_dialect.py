#!/usr/bin/env python3
"""
SQLSync Oracle Dialect

Oracle Database through python-oracledb (thin mode). The descriptor's
database is the service name and also the owning schema for
introspection. Unquoted identifiers fold to upper case.
"""

import logging
from typing import Optional

from core.models import ConnectionDescriptor, Credential
from core.sql_text import quote_literal
from core.sql_types import SQLType
from extensions.dialects.base import Dialect

logger = logging.getLogger(__name__)


class OracleDialect(Dialect):
    """Oracle dialect"""

    name = "oracle"
    scheme = "oracle"
    driver = "oracledb"
    default_port = 1521

    type_catalog_rows = [
        ("NUMBER", SQLType.BIT, 1, "", 0),
        ("NUMBER", SQLType.TINYINT, 3, "", 0),
        ("NUMBER", SQLType.BIGINT, 19, "", 0),
        ("LONG RAW", SQLType.LONGVARBINARY, 2147483647, "", 0),
        ("RAW", SQLType.VARBINARY, 2000, "(M)", 0),
        ("RAW", SQLType.BINARY, 2000, "(M)", 0),
        ("LONG", SQLType.LONGVARCHAR, 2147483647, "", 0),
        ("CHAR", SQLType.CHAR, 2000, "(M)", 0),
        ("NCHAR", SQLType.NCHAR, 2000, "(M)", 0),
        ("NUMBER", SQLType.NUMERIC, 38, "(M,D)", 0),
        ("NUMBER", SQLType.DECIMAL, 38, "(M,D)", 0),
        ("NUMBER", SQLType.INTEGER, 10, "", 0),
        ("NUMBER", SQLType.SMALLINT, 5, "", 0),
        ("BINARY_FLOAT", SQLType.REAL, 7, "", 0),
        ("BINARY_DOUBLE", SQLType.FLOAT, 15, "", 0),
        ("BINARY_DOUBLE", SQLType.DOUBLE, 15, "", 0),
        ("VARCHAR2", SQLType.VARCHAR, 4000, "(M)", 0),
        ("NVARCHAR2", SQLType.NVARCHAR, 4000, "(M)", 0),
        ("NUMBER", SQLType.BOOLEAN, 1, "", 0),
        ("DATE", SQLType.DATE, 7, "", 0),
        ("TIMESTAMP", SQLType.TIME, 11, "", 0),
        ("TIMESTAMP", SQLType.TIMESTAMP, 11, "", 0),
        ("TIMESTAMP WITH TIME ZONE", SQLType.TIMESTAMP_WITH_TIMEZONE, 13, "", 0),
        ("BLOB", SQLType.BLOB, 2147483647, "", 0),
        ("CLOB", SQLType.CLOB, 2147483647, "", 0),
        ("NCLOB", SQLType.NCLOB, 2147483647, "", 0),
    ]

    def table_list_query(self, database: str) -> str:
        return f"""
            SELECT t.TABLE_NAME,
                   o.CREATED AS CREATE_TIME,
                   o.LAST_DDL_TIME AS UPDATE_TIME,
                   c.COMMENTS AS TABLE_COMMENT
            FROM ALL_TABLES t
            JOIN ALL_OBJECTS o
                ON o.OWNER = t.OWNER AND o.OBJECT_NAME = t.TABLE_NAME AND o.OBJECT_TYPE = 'TABLE'
            LEFT JOIN ALL_TAB_COMMENTS c
                ON c.OWNER = t.OWNER AND c.TABLE_NAME = t.TABLE_NAME
            WHERE t.OWNER = UPPER({quote_literal(database)})
            ORDER BY t.TABLE_NAME
        """

    def column_list_query(self, database: str, table: str) -> str:
        return f"""
            SELECT COLUMN_NAME,
                   DATA_TYPE AS TYPE_NAME,
                   COALESCE(DATA_PRECISION, CHAR_LENGTH, DATA_LENGTH, 0) AS COLUMN_SIZE,
                   COALESCE(DATA_SCALE, 0) AS DECIMAL_DIGITS
            FROM ALL_TAB_COLUMNS
            WHERE OWNER = UPPER({quote_literal(database)})
            AND TABLE_NAME = UPPER({quote_literal(table)})
            ORDER BY COLUMN_ID
        """

    def page_clause(self, sql: str, page_no: int, page_size: Optional[int] = None) -> str:
        offset, size = self._page_window(page_no, page_size)
        return (
            f"SELECT * FROM (SELECT page_t.*, ROWNUM page_rn FROM ({sql}) page_t "
            f"WHERE ROWNUM <= {offset + size}) WHERE page_rn > {offset}"
        )

    def placeholder(self, index: int) -> str:
        return f":{index}"

    def _open(self, driver, descriptor: ConnectionDescriptor, credential: Credential):
        host = descriptor.host or "localhost"
        port = descriptor.port or self.default_port
        return driver.connect(
            user=credential.user,
            password=credential.password,
            dsn=f"{host}:{port}/{descriptor.database}",
        )
