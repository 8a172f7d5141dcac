#!/usr/bin/env python3
"""
Tests for SchemaReplicator: create, reuse, force recreate and skip paths
"""

from unittest.mock import patch

import pytest

from conftest import create_table, table_columns
from core.models import SyncJob, TableStatus
from core.schema_replicator import SchemaReplicator
from core.type_catalog import TypeCatalog
from extensions.dialects import SQLiteDialect

CUSTOMERS_DDL = "CREATE TABLE customers (id INTEGER, name VARCHAR(50), balance DECIMAL(10,2), notes TEXT)"

JOB = SyncJob("ops", "src", "dst")
FORCE_JOB = SyncJob("ops", "src", "dst", force_recreate=True)


@pytest.fixture
def replicator(sqlite_endpoints):
    source, destination = sqlite_endpoints
    catalog = TypeCatalog.load(SQLiteDialect(), destination.connection)
    return SchemaReplicator(source, destination, catalog)


def test_creates_missing_table(replicator, source_db, dest_db):
    create_table(source_db, CUSTOMERS_DDL)

    result = replicator.ensure_destination_schema("customers", JOB)

    assert result.status == TableStatus.CREATED
    assert [c.name for c in result.columns] == ["id", "name", "balance", "notes"]
    assert table_columns(dest_db, "customers") == [
        ("id", "INTEGER"), ("name", "VARCHAR(50)"), ("balance", "DECIMAL(10,2)"), ("notes", "TEXT"),
    ]
    assert replicator.destination.connection.commits == 1


def test_reuses_existing_table_without_reconciliation(replicator, source_db, dest_db):
    create_table(source_db, CUSTOMERS_DDL)
    create_table(dest_db, "CREATE TABLE customers (id INTEGER, name VARCHAR(20))")

    result = replicator.ensure_destination_schema("customers", JOB)

    assert result.status == TableStatus.REUSED
    assert [c.name for c in result.columns] == ["id", "name"]
    assert table_columns(dest_db, "customers") == [("id", "INTEGER"), ("name", "VARCHAR(20)")]
    assert replicator.destination.connection.commits == 0


def test_force_recreate_drops_and_rebuilds(replicator, source_db, dest_db):
    create_table(source_db, CUSTOMERS_DDL)
    create_table(dest_db, "CREATE TABLE customers (legacy INTEGER)", [(1,)], "INSERT INTO customers VALUES (?)")

    result = replicator.ensure_destination_schema("customers", FORCE_JOB)

    assert result.status == TableStatus.CREATED
    assert [name for name, _ in table_columns(dest_db, "customers")] == ["id", "name", "balance", "notes"]
    # DROP and CREATE each commit on their own
    assert replicator.destination.connection.commits == 2


def test_force_recreate_on_missing_table_just_creates(replicator, source_db, dest_db):
    create_table(source_db, CUSTOMERS_DDL)

    result = replicator.ensure_destination_schema("customers", FORCE_JOB)

    assert result.status == TableStatus.CREATED
    assert replicator.destination.connection.commits == 1


def test_create_failure_is_skipped(replicator, source_db, dest_db):
    # "group" is reserved; unquoted DDL for it is rejected
    create_table(source_db, 'CREATE TABLE reports (id INTEGER, "group" VARCHAR(10))')

    result = replicator.ensure_destination_schema("reports", JOB)

    assert result.status == TableStatus.SKIPPED
    assert result.skipped
    assert result.columns == []
    assert "reports" in result.cause
    assert table_columns(dest_db, "reports") == []


def test_unsupported_type_falls_back_to_blob(replicator, source_db, dest_db):
    create_table(source_db, "CREATE TABLE shapes (id INTEGER, outline GEOMETRY)")

    result = replicator.ensure_destination_schema("shapes", JOB)

    assert result.status == TableStatus.CREATED
    assert table_columns(dest_db, "shapes") == [("id", "INTEGER"), ("outline", "BLOB")]


def test_missing_source_table_is_skipped(replicator):
    result = replicator.ensure_destination_schema("ghost", JOB)
    assert result.status == TableStatus.SKIPPED


def test_drop_failure_propagates(replicator, source_db, dest_db):
    create_table(source_db, CUSTOMERS_DDL)
    create_table(dest_db, CUSTOMERS_DDL)

    with patch.object(replicator.runner, "execute_update", side_effect=RuntimeError("locked")):
        with pytest.raises(RuntimeError, match="locked"):
            replicator.ensure_destination_schema("customers", FORCE_JOB)


def test_create_failure_is_logged_with_table_name(replicator, source_db, caplog):
    create_table(source_db, 'CREATE TABLE reports (id INTEGER, "group" VARCHAR(10))')

    with caplog.at_level("ERROR", logger="core.schema_replicator"):
        replicator.ensure_destination_schema("reports", JOB)

    assert any("reports" in record.getMessage() for record in caplog.records)
