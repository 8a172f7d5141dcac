#!/usr/bin/env python3
"""
SQLSync Schema Replicator

Makes sure a destination table exists before rows are copied into it:

- destination table missing       -> CREATE from the source columns
- present, force_recreate         -> DROP, then CREATE
- present, no force_recreate      -> reuse as is (no reconciliation)

A failed CREATE never aborts the job. It is logged and reported as a
SKIPPED SchemaResult with no columns, and the caller moves on to the next
table.
"""

import logging
from typing import List

from core.errors import SchemaCreationError
from core.models import Column, Endpoint, SchemaResult, SyncJob, TableStatus
from core.sql_text import drop_table_sql
from core.statement_runner import StatementRunner
from core.type_catalog import TypeCatalog

logger = logging.getLogger(__name__)


class SchemaReplicator:
    """Creates, recreates or reuses destination tables"""

    def __init__(self, source: Endpoint, destination: Endpoint,
                 catalog: TypeCatalog, runner: StatementRunner = None):
        self.source = source
        self.destination = destination
        self.catalog = catalog
        self.runner = runner or StatementRunner()

    def list_columns(self, endpoint: Endpoint, table_name: str) -> List[Column]:
        """Columns of table_name on endpoint, in ordinal order (empty if absent)"""
        sql = endpoint.dialect.column_list_query(endpoint.database, table_name)
        rows = self.runner.query(sql, dict, endpoint.connection)
        return [endpoint.dialect.to_column(row) for row in rows]

    def ensure_destination_schema(self, table_name: str, job: SyncJob) -> SchemaResult:
        existing = self.list_columns(self.destination, table_name)

        if existing and not job.force_recreate:
            logger.info(f"Reusing existing destination table {table_name} ({len(existing)} columns)")
            return SchemaResult(table_name, TableStatus.REUSED, existing)

        if existing:
            logger.info(f"Dropping destination table {table_name} (force recreate)")
            self.runner.execute_update(drop_table_sql(table_name), self.destination.connection)

        return self._create(table_name)

    def _create(self, table_name: str) -> SchemaResult:
        try:
            columns = self.list_columns(self.source, table_name)
            if not columns:
                raise SchemaCreationError(f"Source table {table_name} has no columns", table=table_name)
            ddl = self.catalog.create_table_sql(table_name, columns)
            logger.debug(f"Creating destination table: {ddl}")
            self.runner.execute_update(ddl, self.destination.connection)
        except Exception as e:
            error = e if isinstance(e, SchemaCreationError) else SchemaCreationError(
                f"Failed to create table {table_name}: {e}", table=table_name)
            logger.error(f"Skipping table {table_name}: {error.message}")
            return SchemaResult(table_name, TableStatus.SKIPPED, [], cause=error.message)

        logger.info(f"Created destination table {table_name} ({len(columns)} columns)")
        return SchemaResult(table_name, TableStatus.CREATED, columns)
