#!/usr/bin/env python3
"""
SQLSync Dialect Registry

Maps vendor identifiers to dialect instances. The built-in dialects are
registered when this package is imported:

    mysql (mariadb), postgresql (postgres), sqlite, mssql (sqlserver), oracle

Lookups are case-insensitive. Tests and embedders that need a different set
can work on registry.copy() without touching the default one.
"""

import logging
import threading
from typing import Dict, Iterable, List

from core.errors import UnknownDialectError
from extensions.dialects.base import Dialect
from extensions.dialects.mssql_dialect import MSSQLDialect
from extensions.dialects.mysql_dialect import MySQLDialect
from extensions.dialects.oracle_dialect import OracleDialect
from extensions.dialects.postgresql_dialect import PostgreSQLDialect
from extensions.dialects.sqlite_dialect import SQLiteDialect

logger = logging.getLogger(__name__)


class DialectRegistry:
    """Vendor identifier -> Dialect lookup"""

    def __init__(self):
        self._dialects: Dict[str, Dialect] = {}
        self._aliases: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register(self, vendor: str, dialect: Dialect, aliases: Iterable[str] = ()) -> None:
        """Register dialect under vendor (and aliases). Re-registering replaces."""
        key = vendor.lower()
        with self._lock:
            self._dialects[key] = dialect
            for alias in aliases:
                self._aliases[alias.lower()] = key
        logger.debug(f"Registered dialect {dialect!r} for '{key}'")

    def get(self, vendor: str) -> Dialect:
        key = (vendor or '').lower()
        key = self._aliases.get(key, key)
        dialect = self._dialects.get(key)
        if dialect is None:
            raise UnknownDialectError(
                f"Unknown database vendor '{vendor}'. Available: {', '.join(self.available())}",
                vendor=vendor
            )
        return dialect

    def available(self) -> List[str]:
        """Registered vendor identifiers (aliases excluded), sorted"""
        return sorted(self._dialects)

    def aliases(self) -> Dict[str, str]:
        return dict(self._aliases)

    def copy(self) -> 'DialectRegistry':
        clone = DialectRegistry()
        with self._lock:
            clone._dialects = dict(self._dialects)
            clone._aliases = dict(self._aliases)
        return clone

    def __contains__(self, vendor: str) -> bool:
        key = (vendor or '').lower()
        return self._aliases.get(key, key) in self._dialects


registry = DialectRegistry()
registry.register("mysql", MySQLDialect(), aliases=("mariadb",))
registry.register("postgresql", PostgreSQLDialect(), aliases=("postgres",))
registry.register("sqlite", SQLiteDialect())
registry.register("mssql", MSSQLDialect(), aliases=("sqlserver",))
registry.register("oracle", OracleDialect())


def get_dialect(vendor: str) -> Dialect:
    """Look up vendor in the default registry"""
    return registry.get(vendor)


__all__ = [
    'Dialect',
    'DialectRegistry',
    'registry',
    'get_dialect',
    'MySQLDialect',
    'PostgreSQLDialect',
    'SQLiteDialect',
    'MSSQLDialect',
    'OracleDialect',
]
