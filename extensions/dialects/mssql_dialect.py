#!/usr/bin/env python3
"""
SQLSync SQL Server Dialect

Microsoft SQL Server through pymssql. Paging uses OFFSET/FETCH, which
needs an ORDER BY; an arbitrary SELECT gets ORDER BY (SELECT NULL).
"""

import logging
from typing import Optional

from core.models import ConnectionDescriptor, Credential
from core.sql_text import quote_literal
from core.sql_types import SQLType
from extensions.dialects.base import Dialect

logger = logging.getLogger(__name__)


class MSSQLDialect(Dialect):
    """SQL Server dialect"""

    name = "mssql"
    scheme = "mssql"
    driver = "pymssql"
    default_port = 1433

    type_catalog_rows = [
        ("bit", SQLType.BIT, 1, "", 0),
        ("bit", SQLType.BOOLEAN, 1, "", 0),
        ("tinyint", SQLType.TINYINT, 3, "", 0),
        ("bigint", SQLType.BIGINT, 19, "", 0),
        ("varbinary(max)", SQLType.LONGVARBINARY, 2147483647, "", 0),
        ("varbinary", SQLType.VARBINARY, 8000, "(M)", 0),
        ("binary", SQLType.BINARY, 8000, "(M)", 0),
        ("varchar(max)", SQLType.LONGVARCHAR, 2147483647, "", 0),
        ("nvarchar(max)", SQLType.LONGNVARCHAR, 1073741823, "", 0),
        ("char", SQLType.CHAR, 8000, "(M)", 0),
        ("nchar", SQLType.NCHAR, 4000, "(M)", 0),
        ("numeric", SQLType.NUMERIC, 38, "(M,D)", 0),
        ("decimal", SQLType.DECIMAL, 38, "(M,D)", 0),
        ("int", SQLType.INTEGER, 10, "", 0),
        ("smallint", SQLType.SMALLINT, 5, "", 0),
        ("float", SQLType.FLOAT, 53, "", 0),
        ("real", SQLType.REAL, 24, "", 0),
        ("float", SQLType.DOUBLE, 53, "", 0),
        ("varchar", SQLType.VARCHAR, 8000, "(M)", 0),
        ("nvarchar", SQLType.NVARCHAR, 4000, "(M)", 0),
        ("date", SQLType.DATE, 10, "", 0),
        ("time", SQLType.TIME, 16, "", 0),
        ("datetime2", SQLType.TIMESTAMP, 27, "", 0),
        ("datetimeoffset", SQLType.TIMESTAMP_WITH_TIMEZONE, 34, "", 0),
        ("varbinary(max)", SQLType.BLOB, 2147483647, "", 0),
        ("varchar(max)", SQLType.CLOB, 2147483647, "", 0),
        ("nvarchar(max)", SQLType.NCLOB, 1073741823, "", 0),
    ]

    def table_list_query(self, database: str) -> str:
        return f"""
            SELECT t.name AS TABLE_NAME,
                   t.create_date AS CREATE_TIME,
                   t.modify_date AS UPDATE_TIME,
                   CAST(ep.value AS NVARCHAR(4000)) AS TABLE_COMMENT
            FROM {database}.sys.tables t
            LEFT JOIN {database}.sys.extended_properties ep
                ON ep.major_id = t.object_id AND ep.minor_id = 0 AND ep.name = 'MS_Description'
            WHERE t.is_ms_shipped = 0
            ORDER BY t.name
        """

    def column_list_query(self, database: str, table: str) -> str:
        return f"""
            SELECT COLUMN_NAME,
                   DATA_TYPE AS TYPE_NAME,
                   COALESCE(CHARACTER_MAXIMUM_LENGTH, NUMERIC_PRECISION, DATETIME_PRECISION, 0) AS COLUMN_SIZE,
                   COALESCE(NUMERIC_SCALE, 0) AS DECIMAL_DIGITS
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_CATALOG = {quote_literal(database)}
            AND TABLE_NAME = {quote_literal(table)}
            ORDER BY ORDINAL_POSITION
        """

    def page_clause(self, sql: str, page_no: int, page_size: Optional[int] = None) -> str:
        offset, size = self._page_window(page_no, page_size)
        if " order by " not in f" {sql.lower()} ":
            sql = f"{sql} ORDER BY (SELECT NULL)"
        return f"{sql} OFFSET {offset} ROWS FETCH NEXT {size} ROWS ONLY"

    def blob_type_name(self) -> str:
        return "VARBINARY(MAX)"

    def _open(self, driver, descriptor: ConnectionDescriptor, credential: Credential):
        return driver.connect(
            server=descriptor.host or "localhost",
            port=str(descriptor.port or self.default_port),
            user=credential.user,
            password=credential.password,
            database=descriptor.database,
            login_timeout=10,
        )

    def set_manual_commit(self, connection) -> None:
        connection.autocommit(False)
