"""
SQL text builders shared by the sync engine.

Table and column names are emitted verbatim, as reported by the database
catalogs they come from.
"""

import re
from typing import Callable, Sequence

from core.models import Column

_SIMPLE_SELECT = re.compile(r'^\s*SELECT\s+\*\s+FROM\s+([\w.$"`\[\]]+)\s*$', re.IGNORECASE)


def quote_literal(value: str) -> str:
    """Render a string as a single-quoted SQL literal"""
    return "'" + str(value).replace("'", "''") + "'"


def select_sql(table_name: str) -> str:
    """SELECT * FROM table_name"""
    return f"SELECT * FROM {table_name}"


def drop_table_sql(table_name: str) -> str:
    return f"DROP TABLE {table_name}"


def insert_sql(table_name: str, columns: Sequence[Column],
               placeholder: Callable[[int], str] = lambda index: '?') -> str:
    """INSERT INTO t(a,b) VALUES(?,?) with one bind marker per column"""
    names = ",".join(c.name for c in columns)
    markers = ",".join(placeholder(i + 1) for i in range(len(columns)))
    return f"INSERT INTO {table_name}({names}) VALUES({markers})"


def parse_count_sql(sql: str) -> str:
    """Rewrite a SELECT into the query counting its rows.

    "SELECT * FROM t" becomes "SELECT COUNT(*) FROM t"; anything else is
    counted as a derived table.
    """
    sql = sql.strip().rstrip(';').strip()
    match = _SIMPLE_SELECT.match(sql)
    if match:
        return f"SELECT COUNT(*) FROM {match.group(1)}"
    return f"SELECT COUNT(*) FROM ({sql}) count_t"
