#!/usr/bin/env python3
"""
SQLSync Statement Runner - DB-API helpers

Thin helpers over any DB-API 2.0 connection:
- RowMapper turns cursor rows into dataclass instances by column name
- StatementRunner executes updates (committed individually), scalar
  queries and mapped queries, always closing the cursor it opens
"""

import logging
from contextlib import closing
from dataclasses import fields, is_dataclass
from typing import Any, Dict, List, Optional, Type

logger = logging.getLogger(__name__)


class RowMapper:
    """Maps result rows onto dataclass fields by (case-insensitive) column name"""

    def map(self, cursor, target_cls: Type) -> List[Any]:
        """Materialize every remaining row of an executed cursor as target_cls"""
        return self.map_rows(self.fetch_dicts(cursor), target_cls)

    @staticmethod
    def fetch_dicts(cursor) -> List[Dict[str, Any]]:
        if not cursor.description:
            return []
        names = [d[0] for d in cursor.description]
        rows = []
        for row in cursor.fetchall():
            if isinstance(row, dict):
                rows.append(dict(row))
            else:
                rows.append(dict(zip(names, tuple(row))))
        return rows

    def map_rows(self, rows: List[Dict[str, Any]], target_cls: Type) -> List[Any]:
        if target_cls is dict:
            return [dict(r) for r in rows]
        if not is_dataclass(target_cls):
            raise TypeError(f"{target_cls!r} is not a dataclass")
        return [self.map_row(r, target_cls) for r in rows]

    def map_row(self, row: Dict[str, Any], target_cls: Type) -> Any:
        field_names = {f.name for f in fields(target_cls) if f.init}
        aliases = getattr(target_cls, 'ROW_ALIASES', {})
        kwargs = {}
        for key, value in row.items():
            name = str(key).lower()
            name = aliases.get(name, name)
            # None leaves the dataclass default in place
            if name in field_names and value is not None:
                kwargs[name] = value
        try:
            return target_cls(**kwargs)
        except TypeError as e:
            raise ValueError(f"Row {sorted(row)} cannot be mapped to {target_cls.__name__}: {e}") from e


class StatementRunner:
    """Executes statements on a DB-API connection"""

    def __init__(self, row_mapper: Optional[RowMapper] = None):
        self.row_mapper = row_mapper or RowMapper()

    def execute_update(self, sql: str, connection, commit: bool = True) -> int:
        """Execute one statement and commit it on its own.

        On failure the connection is rolled back and the error re-raised.
        """
        logger.debug(f"Executing update: {sql}")
        try:
            with closing(connection.cursor()) as cursor:
                cursor.execute(sql)
                affected = cursor.rowcount
            if commit:
                connection.commit()
            return affected
        except Exception:
            self.rollback(connection)
            raise

    def execute_scalar_query(self, sql: str, result_type: Type, connection) -> List[Any]:
        """Return the first column of every row, converted to result_type"""
        logger.debug(f"Executing scalar query: {sql}")
        with closing(connection.cursor()) as cursor:
            cursor.execute(sql)
            return [result_type(row[0]) for row in cursor.fetchall()]

    def query(self, sql: str, target_cls: Type, connection) -> List[Any]:
        """Execute a query and map its rows onto target_cls"""
        logger.debug(f"Executing query: {sql}")
        with closing(connection.cursor()) as cursor:
            cursor.execute(sql)
            return self.row_mapper.map(cursor, target_cls)

    @staticmethod
    def rollback(connection):
        try:
            connection.rollback()
        except Exception as e:
            logger.warning(f"Rollback failed: {e}")
