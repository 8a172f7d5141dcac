#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SQLSync Core Package
Exports the sync engine components for clean imports
"""

from core.errors import (
    ErrorCode,
    SyncError,
    ConnectivityError,
    CredentialError,
    SchemaCreationError,
    DialectUnsupportedOperation,
    TransferError,
    UnknownDialectError,
    SyncJobError,
)
from core.models import (
    SyncJob,
    ConnectionDescriptor,
    Credential,
    Table,
    Column,
    TypeInfo,
    TableStatus,
    SchemaResult,
    TableSyncResult,
    SyncReport,
    Endpoint,
)
from core.sql_types import SQLType, TypeRegistry

__version__ = "1.0.0"

__all__ = [
    'ErrorCode',
    'SyncError',
    'ConnectivityError',
    'CredentialError',
    'SchemaCreationError',
    'DialectUnsupportedOperation',
    'TransferError',
    'UnknownDialectError',
    'SyncJobError',
    'SyncJob',
    'ConnectionDescriptor',
    'Credential',
    'Table',
    'Column',
    'TypeInfo',
    'TableStatus',
    'SchemaResult',
    'TableSyncResult',
    'SyncReport',
    'Endpoint',
    'SQLType',
    'TypeRegistry',
]
