#!/usr/bin/env python3
"""
SQLSync Connection Registry

Named connection definitions grouped by principal, read from a JSON file:

    {
      "ops": {
        "crm":       {"vendor": "mysql", "database": "crm", "host": "db1",
                      "port": 3306, "credential": "crm_ro"},
        "warehouse": {"vendor": "postgresql", "database": "dw",
                      "host": "${DW_HOST:localhost}", "credential": "dw_rw"}
      }
    }

String values support ${VAR} and ${VAR:default} environment substitution.
Credential references resolve through the CredentialStore.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.errors import ConnectivityError, CredentialError, UnknownDialectError
from core.models import ConnectionDescriptor
from extensions.dialects import registry as default_registry
from security.credential_store import CredentialStore

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')


def resolve_environment_variables(value: Any) -> Any:
    """Expand ${VAR} and ${VAR:default} in every string of a JSON value"""
    if isinstance(value, str):
        def replace_env_var(match):
            default_value = match.group(2) if match.group(2) is not None else ''
            return os.environ.get(match.group(1), default_value)
        return _ENV_PATTERN.sub(replace_env_var, value)
    elif isinstance(value, dict):
        return {k: resolve_environment_variables(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [resolve_environment_variables(item) for item in value]
    return value


class ConnectionRegistry:
    """ConnectionProvider backed by a JSON definitions file"""

    def __init__(self, definitions: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None,
                 credential_store=None, dialects=None):
        self.definitions = resolve_environment_variables(definitions or {})
        self.credential_store = credential_store
        self.dialects = dialects or default_registry

    @classmethod
    def from_file(cls, path, credential_store=None, dialects=None) -> 'ConnectionRegistry':
        path = Path(path)
        if not path.exists():
            raise ConnectivityError(f"Connection registry not found: {path}", {'file': str(path)})
        try:
            with open(path, 'r') as f:
                definitions = json.load(f)
        except (OSError, ValueError) as e:
            raise ConnectivityError(f"Cannot read connection registry {path}: {e}", {'file': str(path)}) from e
        logger.info(f"Loaded connection registry {path}")
        return cls(definitions, credential_store=credential_store, dialects=dialects)

    def principals(self) -> List[str]:
        return sorted(self.definitions)

    def names(self, principal: str) -> List[str]:
        return sorted(self.definitions.get(principal, {}))

    def get_descriptor(self, principal: str, name: str) -> ConnectionDescriptor:
        entry = self.definitions.get(principal, {}).get(name)
        if entry is None:
            raise ConnectivityError(
                f"No connection '{name}' defined for principal '{principal}'",
                {'principal': principal, 'connection': name}
            )
        try:
            port = entry.get('port')
            return ConnectionDescriptor(
                vendor=entry['vendor'],
                database=entry['database'],
                host=entry.get('host') or None,
                port=int(port) if port not in (None, '') else None,
                credential=entry.get('credential') or None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConnectivityError(
                f"Invalid definition for connection '{name}' of principal '{principal}': {e}",
                {'principal': principal, 'connection': name}
            ) from e

    def get_connection(self, principal: str, name: str):
        """Open a live DB-API connection for a named definition"""
        descriptor = self.get_descriptor(principal, name)
        try:
            dialect = self.dialects.get(descriptor.vendor)
            credential = self._resolve_credential(descriptor)
        except (UnknownDialectError, CredentialError) as e:
            raise ConnectivityError(
                f"Cannot open connection '{name}': {e.message}",
                {'principal': principal, 'connection': name}
            ) from e
        logger.info(f"Opening {descriptor.vendor} connection '{name}' for principal '{principal}'")
        return dialect.connect(descriptor, credential)

    def _resolve_credential(self, descriptor: ConnectionDescriptor):
        if self.credential_store is None:
            self.credential_store = CredentialStore()
        return self.credential_store.resolve(descriptor.credential)

    def close(self, connection) -> None:
        """Close connection; failures are logged, never raised"""
        if connection is None:
            return
        try:
            connection.close()
        except Exception as e:
            logger.warning(f"Failed to close connection: {e}")
