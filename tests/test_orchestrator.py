#!/usr/bin/env python3
"""
End-to-end sync jobs between SQLite databases
"""

import threading

import pytest

from conftest import SQLiteProvider, create_table, fetch_all, table_columns
from core.errors import ConnectivityError, DialectUnsupportedOperation, SyncError, SyncJobError
from core.models import SyncJob, TableStatus
from core.orchestrator import SyncOrchestrator, SyncSession
from extensions.dialects import Dialect, SQLiteDialect, registry

pytestmark = pytest.mark.integration

CUSTOMERS_DDL = "CREATE TABLE customers (id INTEGER, name VARCHAR(50), balance DECIMAL(10,2))"
CUSTOMERS_INSERT = "INSERT INTO customers VALUES (?, ?, ?)"


def seed_customers(path, count):
    rows = [(i, f"customer-{i}", round(i * 1.25, 2)) for i in range(1, count + 1)]
    create_table(path, CUSTOMERS_DDL, rows, CUSTOMERS_INSERT)


def job(force=False):
    return SyncJob(principal="ops", source="src", destination="dst", force_recreate=force)


def test_full_sync_of_1500_rows(provider, source_db, dest_db):
    seed_customers(source_db, 1500)

    report = SyncOrchestrator(provider).run(job())

    assert len(report.tables) == 1
    result = report.tables[0]
    assert result.status == TableStatus.CREATED
    assert result.rows_copied == 1500
    assert result.pages == 2
    assert result.columns == ["id", "name", "balance"]
    assert table_columns(dest_db, "customers") == [
        ("id", "INTEGER"), ("name", "VARCHAR(50)"), ("balance", "DECIMAL(10,2)"),
    ]
    assert fetch_all(dest_db, "SELECT COUNT(*) FROM customers") == [(1500,)]
    assert fetch_all(dest_db, "SELECT name FROM customers WHERE id = 1234") == [("customer-1234",)]
    # one CREATE plus one commit per row
    assert provider.opened["dst"].commits == 1 + 1500
    assert report.finished_at is not None


def test_connections_released_after_success(provider, source_db):
    seed_customers(source_db, 2)

    SyncOrchestrator(provider).run(job())

    assert provider.opened["src"].closed
    assert provider.opened["dst"].closed
    assert len(provider.closed) == 2


def test_existing_destination_columns_are_used(provider, source_db, dest_db):
    seed_customers(source_db, 10)
    create_table(dest_db, "CREATE TABLE customers (id INTEGER, name VARCHAR(50))")

    report = SyncOrchestrator(provider).run(job())

    result = report.tables[0]
    assert result.status == TableStatus.REUSED
    assert result.columns == ["id", "name"]
    assert result.rows_copied == 10
    assert table_columns(dest_db, "customers") == [("id", "INTEGER"), ("name", "VARCHAR(50)")]
    assert provider.opened["dst"].commits == 10


def test_rerun_duplicates_rows(provider, source_db, dest_db):
    seed_customers(source_db, 5)

    SyncOrchestrator(provider).run(job())
    report = SyncOrchestrator(provider).run(job())

    assert report.tables[0].status == TableStatus.REUSED
    assert fetch_all(dest_db, "SELECT COUNT(*) FROM customers") == [(10,)]


def test_force_recreate_replaces_destination(provider, source_db, dest_db):
    seed_customers(source_db, 4)
    create_table(dest_db, "CREATE TABLE customers (legacy TEXT)", [("old",)], "INSERT INTO customers VALUES (?)")

    report = SyncOrchestrator(provider).run(job(force=True))

    assert report.tables[0].status == TableStatus.CREATED
    assert [name for name, _ in table_columns(dest_db, "customers")] == ["id", "name", "balance"]
    assert fetch_all(dest_db, "SELECT COUNT(*) FROM customers") == [(4,)]


def test_create_failure_skips_table_and_continues(provider, source_db, dest_db):
    create_table(source_db, 'CREATE TABLE audit (id INTEGER, "order" INTEGER)', [(1, 2)],
                 "INSERT INTO audit VALUES (?, ?)")
    seed_customers(source_db, 3)

    report = SyncOrchestrator(provider).run(job())

    by_table = {t.table: t for t in report.tables}
    assert by_table["audit"].status == TableStatus.SKIPPED
    assert by_table["audit"].rows_copied == 0
    assert by_table["audit"].cause
    assert by_table["customers"].status == TableStatus.CREATED
    assert by_table["customers"].rows_copied == 3
    assert report.tables_skipped == 1
    assert table_columns(dest_db, "audit") == []


def test_tables_processed_in_source_order(provider, source_db):
    create_table(source_db, "CREATE TABLE b_table (id INTEGER)")
    create_table(source_db, "CREATE TABLE a_table (id INTEGER)")

    report = SyncOrchestrator(provider).run(job())

    assert [t.table for t in report.tables] == ["a_table", "b_table"]


def test_report_to_dict(provider, source_db):
    seed_customers(source_db, 3)

    data = SyncOrchestrator(provider).run(job()).to_dict()

    assert data["principal"] == "ops"
    assert data["summary"] == {"tables": 1, "created": 1, "reused": 0, "skipped": 0, "rows_copied": 3}
    assert data["tables"][0]["status"] == "created"


def test_unknown_destination_fails_in_init(provider, source_db):
    seed_customers(source_db, 1)
    bad_job = SyncJob("ops", "src", "nowhere")

    with pytest.raises(SyncJobError) as exc_info:
        SyncOrchestrator(provider).run(bad_job)

    assert isinstance(exc_info.value.__cause__, ConnectivityError)
    assert provider.opened["src"].closed


def test_transfer_failure_aborts_job_and_releases(source_db, dest_db):
    class NoPagingDialect(SQLiteDialect):
        page_clause = Dialect.page_clause

    dialects = registry.copy()
    dialects.register("nopage", NoPagingDialect())
    provider = SQLiteProvider({"src": source_db, "dst": dest_db}, vendors={"src": "nopage"})
    create_table(source_db, "CREATE TABLE a_first (id INTEGER)", [(1,)], "INSERT INTO a_first VALUES (?)")
    create_table(source_db, "CREATE TABLE b_second (id INTEGER)", [(1,)], "INSERT INTO b_second VALUES (?)")

    with pytest.raises(SyncJobError) as exc_info:
        SyncOrchestrator(provider, dialects=dialects).run(job())

    error = exc_info.value
    assert isinstance(error.__cause__, DialectUnsupportedOperation)
    assert error.details["table"] == "a_first"
    assert error.details["tables_completed"] == 0
    assert provider.opened["src"].closed
    assert provider.opened["dst"].closed
    # remaining tables were not touched
    assert table_columns(dest_db, "b_second") == []


def test_close_failure_does_not_prevent_other_close(provider, source_db):
    seed_customers(source_db, 1)
    original_close = provider.close

    def flaky_close(connection):
        if connection is provider.opened["src"]:
            raise RuntimeError("socket already gone")
        original_close(connection)

    provider.close = flaky_close
    SyncOrchestrator(provider).run(job())

    assert provider.opened["dst"].closed


def test_session_cannot_run_twice(provider, source_db):
    session = SyncSession(job(), provider)
    session.run()

    with pytest.raises(SyncError):
        session.run()


def test_catalog_cleared_on_release(provider, source_db):
    seed_customers(source_db, 1)
    session = SyncSession(job(), provider)
    session.run()

    assert session.catalog is not None
    assert len(session.catalog) == 0


def test_concurrent_jobs_share_one_orchestrator(tmp_path):
    paths = {name: str(tmp_path / f"{name}.db") for name in ("crm", "crm_copy", "erp", "erp_copy")}
    seed_customers(paths["crm"], 1200)
    create_table(paths["erp"], "CREATE TABLE orders (id INTEGER, total DECIMAL(8,2))",
                 [(i, i * 2.5) for i in range(1, 301)], "INSERT INTO orders VALUES (?, ?)")
    provider = SQLiteProvider(paths)
    orchestrator = SyncOrchestrator(provider)
    reports = {}
    errors = []

    def run(source, destination):
        try:
            reports[source] = orchestrator.run(SyncJob("ops", source, destination))
        except Exception as e:
            errors.append(e)

    threads = [
        threading.Thread(target=run, args=("crm", "crm_copy")),
        threading.Thread(target=run, args=("erp", "erp_copy")),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    assert [(t.table, t.rows_copied) for t in reports["crm"].tables] == [("customers", 1200)]
    assert [(t.table, t.rows_copied) for t in reports["erp"].tables] == [("orders", 300)]
    assert fetch_all(paths["crm_copy"], "SELECT COUNT(*) FROM customers") == [(1200,)]
    assert fetch_all(paths["erp_copy"], "SELECT COUNT(*) FROM orders") == [(300,)]
    assert fetch_all(paths["erp_copy"], "SELECT name FROM sqlite_master WHERE name = 'customers'") == []
    assert len(provider.closed) == 4
    assert all(provider.opened[name].closed for name in paths)
