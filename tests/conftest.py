#!/usr/bin/env python3
"""
SQLSync Test Configuration - PyTest Configuration and Fixtures

Shared fixtures for the sync engine tests: SQLite databases in a temporary
directory, a connection provider that hands out commit-counting
connections, and helpers to seed tables.
"""

import pytest
import os
import sys
import sqlite3
from typing import Dict, Iterable, Optional, Sequence

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import ConfigManager
from core.errors import ConnectivityError
from core.models import ConnectionDescriptor, Endpoint
from extensions.dialects import SQLiteDialect


class CountingConnection:
    """DB-API connection wrapper that counts commit() calls"""

    def __init__(self, connection):
        self.__dict__['_connection'] = connection
        self.__dict__['commits'] = 0
        self.__dict__['rollbacks'] = 0
        self.__dict__['closed'] = False

    def commit(self):
        self.__dict__['commits'] += 1
        self._connection.commit()

    def rollback(self):
        self.__dict__['rollbacks'] += 1
        self._connection.rollback()

    def close(self):
        self.__dict__['closed'] = True
        self._connection.close()

    def __getattr__(self, name):
        return getattr(self._connection, name)

    def __setattr__(self, name, value):
        setattr(self._connection, name, value)


class SQLiteProvider:
    """ConnectionProvider over SQLite files, keyed by connection name"""

    def __init__(self, databases: Dict[str, str], vendors: Optional[Dict[str, str]] = None):
        self.databases = databases
        self.vendors = vendors or {}
        self.opened: Dict[str, CountingConnection] = {}
        self.closed = []

    def get_descriptor(self, principal: str, name: str) -> ConnectionDescriptor:
        if name not in self.databases:
            raise ConnectivityError(f"No connection '{name}' defined for principal '{principal}'")
        return ConnectionDescriptor(vendor=self.vendors.get(name, 'sqlite'), database=self.databases[name])

    def get_connection(self, principal: str, name: str):
        connection = CountingConnection(sqlite3.connect(self.databases[name]))
        self.opened[name] = connection
        return connection

    def close(self, connection):
        self.closed.append(connection)
        connection.close()


def create_table(path: str, ddl: str, rows: Iterable[Sequence] = (), insert: Optional[str] = None):
    """Create a table in the SQLite file at path and seed it"""
    conn = sqlite3.connect(path)
    try:
        conn.execute(ddl)
        if insert:
            conn.executemany(insert, list(rows))
        conn.commit()
    finally:
        conn.close()


def fetch_all(path: str, sql: str):
    conn = sqlite3.connect(path)
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


def table_columns(path: str, table: str):
    """[(name, declared type)] of a SQLite table"""
    return [(row[1], row[2]) for row in fetch_all(path, f"PRAGMA table_info({table})")]


@pytest.fixture
def source_db(tmp_path):
    return str(tmp_path / "source.db")


@pytest.fixture
def dest_db(tmp_path):
    return str(tmp_path / "dest.db")


@pytest.fixture
def provider(source_db, dest_db):
    return SQLiteProvider({'src': source_db, 'dst': dest_db})


@pytest.fixture
def sqlite_endpoints(source_db, dest_db):
    """Open (source, destination) endpoints; destination counts commits"""
    dialect = SQLiteDialect()
    source = Endpoint('src', ConnectionDescriptor('sqlite', source_db), dialect, sqlite3.connect(source_db))
    destination = Endpoint('dst', ConnectionDescriptor('sqlite', dest_db), dialect,
                           CountingConnection(sqlite3.connect(dest_db)))
    dialect.set_manual_commit(destination.connection)
    yield source, destination
    source.connection.close()
    destination.connection.close()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate SQLSYNC_* variables and the config singleton"""
    original = {key for key in os.environ if key.startswith('SQLSYNC_')}
    for key in original:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv('SQLSYNC_HOME', str(tmp_path))
    ConfigManager.reset()
    yield monkeypatch
    ConfigManager.reset()
    # .env loading writes straight into os.environ
    for key in [k for k in os.environ if k.startswith('SQLSYNC_') and k not in original]:
        os.environ.pop(key, None)


# Custom markers for test organization
def pytest_configure(config):
    """Configure custom pytest markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that run whole sync jobs"
    )
