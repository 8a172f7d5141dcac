#!/usr/bin/env python3
"""
SQLSync Type Catalog - destination type lookup and DDL generation

The destination database reports which native type implements each generic
type code, together with a create-params template such as "(M,D)" or
"[(M)] [UNSIGNED] [ZEROFILL]". Column definitions are rendered by picking
the first catalog entry for the column's generic code and substituting its
precision (M) and scale (,D) into the template.
"""

import logging
import re
from typing import Iterable, List, Optional

from core.models import Column, TypeInfo
from core.statement_runner import RowMapper

logger = logging.getLogger(__name__)

_NOT_PARAM_CHAR = re.compile(r'[^0-9,()]')

DEFAULT_BLOB_TYPE = "BLOB"


def render_create_params(template: str, column: Column, type_info: TypeInfo) -> str:
    """Substitute precision/scale into a create-params template.

    Zero precision or scale counts as absent and falls back to the type's
    own default. Everything but digits, commas and parentheses is dropped
    afterwards, so "[(M[,D])] [UNSIGNED]" with 10/2 renders as "(10,2)".
    """
    precision = column.precision or type_info.default_precision
    scale = column.scale or type_info.default_scale
    params = template.replace("M", str(precision))
    params = params.replace(",D", f",{scale}")
    return _NOT_PARAM_CHAR.sub("", params)


def resolve_column_ddl(column: Column, catalog: Iterable[TypeInfo],
                       blob_type: str = DEFAULT_BLOB_TYPE) -> str:
    """Column definition "name TYPE[(params)]" for the destination catalog"""
    type_info = _first_match(column.generic_type, catalog)
    if type_info is None:
        logger.debug(f"No destination type for column {column.name} "
                     f"(generic type {column.generic_type}), using {blob_type}")
        return f"{column.name} {blob_type}"

    fragment = type_info.native_type_name
    if type_info.create_params and type_info.create_params.strip():
        fragment += render_create_params(type_info.create_params, column, type_info)
    return f"{column.name} {fragment}"


def _first_match(generic_type: int, catalog: Iterable[TypeInfo]) -> Optional[TypeInfo]:
    for type_info in catalog:
        if int(type_info.generic_type) == int(generic_type):
            return type_info
    return None


class TypeCatalog:
    """Destination type catalog, loaded once per job"""

    def __init__(self, entries: Optional[Iterable[TypeInfo]] = None,
                 blob_type: str = DEFAULT_BLOB_TYPE):
        self.entries: List[TypeInfo] = list(entries or [])
        self.blob_type = blob_type

    @classmethod
    def load(cls, dialect, connection, row_mapper: Optional[RowMapper] = None) -> 'TypeCatalog':
        """Read the catalog the destination dialect reports for connection"""
        row_mapper = row_mapper or RowMapper()
        rows = dialect.type_catalog(connection)
        entries = row_mapper.map_rows(rows, TypeInfo)
        logger.debug(f"Loaded {len(entries)} type catalog entries for {dialect.name}")
        return cls(entries, blob_type=dialect.blob_type_name())

    def find(self, generic_type: int) -> Optional[TypeInfo]:
        """First entry, in catalog order, implementing generic_type"""
        return _first_match(generic_type, self.entries)

    def resolve_column_ddl(self, column: Column) -> str:
        return resolve_column_ddl(column, self.entries, self.blob_type)

    def create_table_sql(self, table_name: str, columns: Iterable[Column]) -> str:
        """CREATE TABLE name(col TYPE,col TYPE,...)"""
        definitions = ",".join(self.resolve_column_ddl(c) for c in columns)
        return f"CREATE TABLE {table_name}({definitions})"

    def clear(self) -> None:
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
