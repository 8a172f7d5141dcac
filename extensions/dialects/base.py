#!/usr/bin/env python3
"""
SQLSync Dialect Base - per-vendor SQL strategy

A dialect is a stateless object that knows one vendor's SQL syntax and
driver conventions:
- connectivity descriptor (driver token, connection URL, connect)
- metadata introspection queries (tables, columns)
- pagination of an arbitrary SELECT
- the type catalog the vendor reports for DDL generation
- how to switch a connection into manual-commit mode

Subclasses override what differs; pagination is opt-in and the base class
refuses it with DialectUnsupportedOperation.
"""

import importlib
import logging
from typing import Any, Dict, List, Optional, Tuple

from core.errors import ConnectivityError, DialectUnsupportedOperation, sanitize_message
from core.models import Column, ConnectionDescriptor, Credential
from core.sql_types import TypeRegistry

logger = logging.getLogger(__name__)

# TYPE_NAME, DATA_TYPE, PRECISION, CREATE_PARAMS, MINIMUM_SCALE
TypeCatalogRow = Tuple[str, int, int, str, int]

TYPE_CATALOG_COLUMNS = ('TYPE_NAME', 'DATA_TYPE', 'PRECISION', 'CREATE_PARAMS', 'MINIMUM_SCALE')


class Dialect:
    """Base class for vendor dialects"""

    name: str = "generic"
    scheme: str = "generic"
    driver: str = ""
    default_port: Optional[int] = None
    type_catalog_rows: List[TypeCatalogRow] = []

    def driver_identifier(self) -> str:
        """DB-API module used to reach this vendor"""
        return self.driver

    def build_connection_url(self, host: Optional[str], port: Optional[int], database: str) -> str:
        host = host or "localhost"
        port = port or self.default_port
        netloc = f"{host}:{port}" if port else host
        return f"{self.scheme}://{netloc}/{database}"

    def table_list_query(self, database: str) -> str:
        """Query returning TABLE_NAME, CREATE_TIME, UPDATE_TIME, TABLE_COMMENT"""
        raise NotImplementedError("Subclasses must implement table_list_query")

    def column_list_query(self, database: str, table: str) -> str:
        """Query returning COLUMN_NAME, TYPE_NAME, COLUMN_SIZE, DECIMAL_DIGITS in ordinal order"""
        raise NotImplementedError("Subclasses must implement column_list_query")

    def to_column(self, row: Dict[str, Any]) -> Column:
        """Build a Column from one column-list row"""
        row = {str(k).upper(): v for k, v in row.items()}
        native_type = row.get('TYPE_NAME') or ''
        generic_type, parsed_precision, parsed_scale = TypeRegistry.map_to_sql_type(self.name, native_type)
        precision = _as_int(row.get('COLUMN_SIZE')) or parsed_precision or 0
        scale = _as_int(row.get('DECIMAL_DIGITS')) or parsed_scale or 0
        return Column(
            name=row['COLUMN_NAME'],
            generic_type=int(generic_type),
            precision=precision,
            scale=scale,
            native_type=native_type,
        )

    def default_page_size(self) -> int:
        """Rows per page when a caller does not ask for a size"""
        return 100

    def page_clause(self, sql: str, page_no: int, page_size: Optional[int] = None) -> str:
        """Rewrite sql to return rows [(page_no-1)*page_size, page_no*page_size)"""
        raise DialectUnsupportedOperation(
            f"Pagination is not implemented for dialect '{self.name}'",
            dialect=self.name, operation='page_clause'
        )

    def _page_window(self, page_no: int, page_size: Optional[int]) -> Tuple[int, int]:
        """Validate page arguments and return (offset, size)"""
        size = self.default_page_size() if page_size is None else page_size
        if page_no < 1:
            raise ValueError(f"Page numbers start at 1, got {page_no}")
        if size < 1:
            raise ValueError(f"Page size must be positive, got {size}")
        return (page_no - 1) * size, size

    def placeholder(self, index: int) -> str:
        """Bind marker for the index-th (1-based) parameter"""
        return "%s"

    def blob_type_name(self) -> str:
        """Type used when a column has no match in the destination catalog"""
        return "BLOB"

    def type_catalog(self, connection) -> List[Dict[str, Any]]:
        """Type catalog this vendor reports, in catalog order.

        The rows are a static snapshot of one reference server version
        rather than what the connected server reports.
        """
        return [dict(zip(TYPE_CATALOG_COLUMNS, row)) for row in self.type_catalog_rows]

    def connect(self, descriptor: ConnectionDescriptor, credential: Optional[Credential] = None):
        """Open a DB-API connection for descriptor"""
        driver = self._import_driver()
        try:
            connection = self._open(driver, descriptor, credential or Credential())
        except Exception as e:
            url = self.build_connection_url(descriptor.host, descriptor.port, descriptor.database)
            message = sanitize_message(f"Failed to connect to {url}: {e}")
            logger.error(message)
            raise ConnectivityError(message, {'vendor': self.name, 'database': descriptor.database}) from e
        logger.debug(f"Connected to {self.name} database {descriptor.database}")
        return connection

    def _import_driver(self):
        try:
            return importlib.import_module(self.driver)
        except ImportError as e:
            message = f"{self.driver} not installed. Please install it: pip install {self.install_hint()}"
            logger.error(message)
            raise ConnectivityError(message, {'vendor': self.name}) from e

    def install_hint(self) -> str:
        return self.driver

    def _open(self, driver, descriptor: ConnectionDescriptor, credential: Credential):
        raise NotImplementedError("Subclasses must implement _open")

    def set_manual_commit(self, connection) -> None:
        """Switch connection to manual commit"""
        connection.autocommit = False

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


def _as_int(value) -> int:
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0
