#!/usr/bin/env python3
"""
SQLSync MySQL Dialect

MySQL and MariaDB through PyMySQL. The type catalog mirrors what MySQL
reports for its column types, create-params templates included, e.g.
"[(M[,D])] [UNSIGNED] [ZEROFILL]".
"""

import logging
from typing import Optional

from core.models import ConnectionDescriptor, Credential
from core.sql_text import quote_literal
from core.sql_types import SQLType
from extensions.dialects.base import Dialect

logger = logging.getLogger(__name__)

_INT_PARAMS = "[(M)] [UNSIGNED] [ZEROFILL]"
_CHAR_PARAMS = "[(M)] [CHARACTER SET charset_name] [COLLATE collation_name]"


class MySQLDialect(Dialect):
    """MySQL dialect"""

    name = "mysql"
    scheme = "mysql"
    driver = "pymysql"
    default_port = 3306

    type_catalog_rows = [
        ("BIT", SQLType.BIT, 1, "[(M)]", 0),
        ("BOOL", SQLType.BOOLEAN, 3, "", 0),
        ("TINYINT", SQLType.TINYINT, 3, _INT_PARAMS, 0),
        ("BIGINT", SQLType.BIGINT, 19, _INT_PARAMS, 0),
        ("LONGBLOB", SQLType.LONGVARBINARY, 2147483647, "", 0),
        ("VARBINARY", SQLType.VARBINARY, 65535, "(M)", 0),
        ("BINARY", SQLType.BINARY, 255, "(M)", 0),
        ("LONGTEXT", SQLType.LONGVARCHAR, 2147483647, "", 0),
        ("LONGTEXT", SQLType.LONGNVARCHAR, 2147483647, "", 0),
        ("CHAR", SQLType.CHAR, 255, _CHAR_PARAMS, 0),
        ("CHAR", SQLType.NCHAR, 255, _CHAR_PARAMS, 0),
        ("NUMERIC", SQLType.NUMERIC, 65, "[(M[,D])] [ZEROFILL]", 0),
        ("DECIMAL", SQLType.DECIMAL, 65, "[(M[,D])] [UNSIGNED] [ZEROFILL]", 0),
        ("INT", SQLType.INTEGER, 10, _INT_PARAMS, 0),
        ("SMALLINT", SQLType.SMALLINT, 5, _INT_PARAMS, 0),
        ("FLOAT", SQLType.REAL, 12, "", 0),
        ("DOUBLE", SQLType.DOUBLE, 22, "", 0),
        ("DOUBLE", SQLType.FLOAT, 22, "", 0),
        ("VARCHAR", SQLType.VARCHAR, 65535, "(M) [CHARACTER SET charset_name] [COLLATE collation_name]", 0),
        ("VARCHAR", SQLType.NVARCHAR, 65535, "(M) [CHARACTER SET charset_name] [COLLATE collation_name]", 0),
        ("DATE", SQLType.DATE, 10, "", 0),
        ("TIME", SQLType.TIME, 16, "", 0),
        ("DATETIME", SQLType.TIMESTAMP, 26, "", 0),
        ("TIMESTAMP", SQLType.TIMESTAMP_WITH_TIMEZONE, 26, "", 0),
        ("LONGBLOB", SQLType.BLOB, 2147483647, "", 0),
        ("LONGTEXT", SQLType.CLOB, 2147483647, "", 0),
        ("LONGTEXT", SQLType.NCLOB, 2147483647, "", 0),
    ]

    def table_list_query(self, database: str) -> str:
        return f"""
            SELECT TABLE_NAME, CREATE_TIME, UPDATE_TIME, TABLE_COMMENT
            FROM information_schema.TABLES
            WHERE TABLE_SCHEMA = {quote_literal(database)}
            AND TABLE_TYPE = 'BASE TABLE'
            ORDER BY TABLE_NAME
        """

    def column_list_query(self, database: str, table: str) -> str:
        # COLUMN_TYPE keeps display width, so tinyint(1) stays distinguishable
        return f"""
            SELECT COLUMN_NAME,
                   COLUMN_TYPE AS TYPE_NAME,
                   COALESCE(CHARACTER_MAXIMUM_LENGTH, NUMERIC_PRECISION, DATETIME_PRECISION, 0) AS COLUMN_SIZE,
                   COALESCE(NUMERIC_SCALE, 0) AS DECIMAL_DIGITS
            FROM information_schema.COLUMNS
            WHERE TABLE_SCHEMA = {quote_literal(database)}
            AND TABLE_NAME = {quote_literal(table)}
            ORDER BY ORDINAL_POSITION
        """

    def page_clause(self, sql: str, page_no: int, page_size: Optional[int] = None) -> str:
        """Window sql with LIMIT offset, size.

        Each page is a separate query and sql carries no ORDER BY, so the
        server may return rows in a different order per page (on PostgreSQL,
        synchronized sequential scans on large tables).
        """
        offset, size = self._page_window(page_no, page_size)
        return f"{sql} LIMIT {offset}, {size}"

    def install_hint(self) -> str:
        return "PyMySQL"

    def _open(self, driver, descriptor: ConnectionDescriptor, credential: Credential):
        return driver.connect(
            host=descriptor.host or "localhost",
            port=int(descriptor.port or self.default_port),
            user=credential.user,
            password=credential.password or "",
            database=descriptor.database,
            charset="utf8mb4",
            connect_timeout=10,
        )

    def set_manual_commit(self, connection) -> None:
        # PyMySQL exposes autocommit as a method
        connection.autocommit(False)
