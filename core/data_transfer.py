#!/usr/bin/env python3
"""
SQLSync Data Transfer - paginated row copy

Rows are read from the source one page of SYNC_BATCH_SIZE rows at a time
and written to the destination with a single prepared INSERT, committing
after every row. A failure leaves the rows committed so far in place;
re-running a job copies them again.
"""

import logging
import math
from contextlib import closing
from dataclasses import dataclass
from typing import List, Sequence

from core.errors import DialectUnsupportedOperation, TransferError
from core.models import Column, Endpoint
from core.sql_text import insert_sql, parse_count_sql, select_sql
from core.statement_runner import StatementRunner

logger = logging.getLogger(__name__)

SYNC_BATCH_SIZE = 1000


def total_pages(count: int, batch: int = SYNC_BATCH_SIZE) -> int:
    """Pages needed for count rows; an empty table still reads one page"""
    if batch < 1:
        raise ValueError(f"Batch size must be positive, got {batch}")
    return max(1, math.ceil(count / batch))


@dataclass
class TransferResult:
    rows_copied: int = 0
    pages: int = 0


class DataTransfer:
    """Copies every row of a table from source to destination"""

    def __init__(self, source: Endpoint, destination: Endpoint,
                 runner: StatementRunner = None, batch_size: int = SYNC_BATCH_SIZE):
        self.source = source
        self.destination = destination
        self.runner = runner or StatementRunner()
        self.batch_size = batch_size

    def count_rows(self, select: str) -> int:
        result = self.runner.execute_scalar_query(parse_count_sql(select), int, self.source.connection)
        return result[0] if result else 0

    def copy_rows(self, table_name: str, columns: Sequence[Column]) -> TransferResult:
        """Copy all rows of table_name, writing exactly columns in that order"""
        insert = insert_sql(table_name, columns, self.destination.dialect.placeholder)
        select = select_sql(table_name)
        result = TransferResult()

        try:
            pages = total_pages(self.count_rows(select), self.batch_size)
            logger.info(f"Copying {table_name}: {pages} page(s) of up to {self.batch_size} rows")
            with closing(self.destination.connection.cursor()) as insert_cursor:
                for page_no in range(1, pages + 1):
                    before = result.rows_copied
                    self._copy_page(table_name, select, page_no, columns, insert, insert_cursor, result)
                    result.pages = page_no
                    logger.debug(f"{table_name}: page {page_no}/{pages} copied {result.rows_copied - before} rows")
        except DialectUnsupportedOperation:
            logger.error(f"Cannot page through {table_name} with dialect {self.source.dialect.name}")
            raise
        except TransferError as e:
            logger.error(f"Transfer of {table_name} failed: {e.message}")
            self.runner.rollback(self.destination.connection)
            e.rows_copied = result.rows_copied
            e.details['rows_copied'] = result.rows_copied
            raise
        except Exception as e:
            logger.error(f"Transfer of {table_name} failed after {result.rows_copied} rows: {e}")
            self.runner.rollback(self.destination.connection)
            raise TransferError(f"Failed to copy rows of {table_name}: {e}",
                                table=table_name, rows_copied=result.rows_copied) from e

        logger.info(f"Copied {result.rows_copied} rows into {table_name}")
        return result

    def _copy_page(self, table_name, select, page_no, columns, insert, insert_cursor,
                   result: TransferResult) -> None:
        page_sql = self.source.dialect.page_clause(select, page_no, self.batch_size)
        with closing(self.source.connection.cursor()) as cursor:
            cursor.execute(page_sql)
            positions = None
            while True:
                rows = cursor.fetchmany(self.batch_size)
                if not rows:
                    break
                if positions is None:
                    positions = column_positions(cursor.description, columns, table_name)
                for row in rows:
                    insert_cursor.execute(insert, [row[i] for i in positions])
                    self.destination.connection.commit()
                    result.rows_copied += 1


def column_positions(description, columns: Sequence[Column], table_name: str) -> List[int]:
    """Index into the source row of every named column.

    Exact name match first, then case-insensitive.
    """
    names = [d[0] for d in description or ()]
    lowered = [n.lower() for n in names]
    positions = []
    for column in columns:
        if column.name in names:
            positions.append(names.index(column.name))
        elif column.name.lower() in lowered:
            positions.append(lowered.index(column.name.lower()))
        else:
            raise TransferError(f"Column {column.name} not found in source rows of {table_name}",
                                table=table_name)
    return positions
