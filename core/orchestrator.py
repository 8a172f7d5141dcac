#!/usr/bin/env python3
"""
SQLSync Orchestrator - runs one sync job end to end

    INIT -> (per table: SCHEMA -> [SKIP | DATA]) -> RELEASE

INIT opens the source and destination connections, loads the destination
type catalog and puts the destination into manual-commit mode. Tables are
processed strictly one after another. RELEASE always runs.

All per-job state lives in a SyncSession, which is built for a single run
and never shared; SyncOrchestrator itself holds no job state, so separate
threads may run independent jobs through the same orchestrator.
"""

import logging
from datetime import datetime
from typing import List, Optional

from core.data_transfer import SYNC_BATCH_SIZE, DataTransfer
from core.errors import ConnectivityError, SyncError, SyncJobError, UnknownDialectError
from core.models import Endpoint, SyncJob, SyncReport, Table, TableStatus, TableSyncResult
from core.schema_replicator import SchemaReplicator
from core.statement_runner import RowMapper, StatementRunner
from core.type_catalog import TypeCatalog
from extensions.dialects import registry as default_registry

logger = logging.getLogger(__name__)


class SyncSession:
    """Job-scoped worker: one job, one run"""

    def __init__(self, job: SyncJob, provider, dialects=None,
                 runner: Optional[StatementRunner] = None, batch_size: int = SYNC_BATCH_SIZE):
        self.job = job
        self.provider = provider
        self.dialects = dialects or default_registry
        self.runner = runner or StatementRunner()
        self.row_mapper = self.runner.row_mapper
        self.batch_size = batch_size

        self.source: Optional[Endpoint] = None
        self.destination: Optional[Endpoint] = None
        self.catalog: Optional[TypeCatalog] = None
        self.current_table: Optional[str] = None
        self._used = False

    def run(self) -> SyncReport:
        if self._used:
            raise SyncError("SyncSession has already run; create a new session per job")
        self._used = True

        job = self.job
        report = SyncReport(job)
        logger.info(f"Starting sync {job.principal}: {job.source} -> {job.destination}"
                    f"{' (force recreate)' if job.force_recreate else ''}")
        try:
            self._initialize()
            for table in self._list_tables():
                self.current_table = table.name
                report.tables.append(self._sync_table(table.name))
            self.current_table = None
        except Exception as e:
            raise self._job_error(e, report) from e
        finally:
            self._release()

        report.finished_at = datetime.now()
        logger.info(f"Sync {job.principal}: {job.source} -> {job.destination} finished: "
                    f"{len(report.tables)} tables, {report.rows_copied} rows copied, "
                    f"{report.tables_skipped} skipped")
        return report

    def _initialize(self):
        self.source = self._open_endpoint(self.job.source)
        self.destination = self._open_endpoint(self.job.destination)
        try:
            self.catalog = TypeCatalog.load(self.destination.dialect, self.destination.connection, self.row_mapper)
            self.destination.dialect.set_manual_commit(self.destination.connection)
        except Exception as e:
            raise ConnectivityError(
                f"Failed to initialize destination '{self.job.destination}': {e}",
                {'connection': self.job.destination}
            ) from e

    def _open_endpoint(self, name: str) -> Endpoint:
        descriptor = self.provider.get_descriptor(self.job.principal, name)
        try:
            dialect = self.dialects.get(descriptor.vendor)
        except UnknownDialectError as e:
            raise ConnectivityError(f"Connection '{name}': {e.message}", {'connection': name}) from e
        connection = self.provider.get_connection(self.job.principal, name)
        if connection is None:
            raise ConnectivityError(f"No connection returned for '{name}'", {'connection': name})
        return Endpoint(name, descriptor, dialect, connection)

    def _list_tables(self) -> List[Table]:
        sql = self.source.dialect.table_list_query(self.source.database)
        tables = self.runner.query(sql, Table, self.source.connection)
        logger.info(f"Found {len(tables)} tables in source '{self.job.source}'")
        return tables

    def _sync_table(self, table_name: str) -> TableSyncResult:
        replicator = SchemaReplicator(self.source, self.destination, self.catalog, self.runner)
        schema = replicator.ensure_destination_schema(table_name, self.job)
        if schema.skipped or not schema.columns:
            return TableSyncResult(table_name, TableStatus.SKIPPED, cause=schema.cause)

        transfer = DataTransfer(self.source, self.destination, self.runner, self.batch_size)
        copied = transfer.copy_rows(table_name, schema.columns)
        return TableSyncResult(
            table=table_name,
            status=schema.status,
            columns=[c.name for c in schema.columns],
            rows_copied=copied.rows_copied,
            pages=copied.pages,
        )

    def _job_error(self, error: Exception, report: SyncReport) -> SyncJobError:
        job = self.job
        where = f" at table {self.current_table}" if self.current_table else ""
        message = getattr(error, 'message', None) or str(error)
        logger.error(f"Sync {job.principal}: {job.source} -> {job.destination} failed{where}: {message}")
        job_error = SyncJobError(
            f"Sync {job.source} -> {job.destination} failed{where}: {message}",
            {
                'principal': job.principal,
                'source': job.source,
                'destination': job.destination,
                'table': self.current_table,
                'tables_completed': len(report.tables),
                'rows_copied': report.rows_copied,
            }
        )
        job_error.report = report
        return job_error

    def _release(self):
        for endpoint in (self.source, self.destination):
            if endpoint is None or endpoint.connection is None:
                continue
            try:
                self.provider.close(endpoint.connection)
            except Exception as e:
                logger.warning(f"Failed to close connection '{endpoint.name}': {e}")
            endpoint.connection = None
        if self.catalog is not None:
            self.catalog.clear()
        logger.debug(f"Released resources for job {self.job.source} -> {self.job.destination}")


class SyncOrchestrator:
    """Entry point: run(job) -> SyncReport, raising SyncJobError on failure"""

    def __init__(self, provider, dialects=None, runner: Optional[StatementRunner] = None,
                 batch_size: int = SYNC_BATCH_SIZE):
        self.provider = provider
        self.dialects = dialects or default_registry
        self.runner = runner or StatementRunner(RowMapper())
        self.batch_size = batch_size

    def run(self, job: SyncJob) -> SyncReport:
        session = SyncSession(job, self.provider, self.dialects, self.runner, self.batch_size)
        return session.run()
