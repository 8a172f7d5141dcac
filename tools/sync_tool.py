#!/usr/bin/env python3
"""
SQLSync Command Line Tool
=========================

Runs one source -> destination sync job and prints the outcome as a JSON
response envelope:

    {"code": 200, "message": "OK", "value": {...report...}}
    {"code": 500, "message": "<error>", "value": null}

Usage:
    # Copy every table of 'crm' into 'warehouse' for principal 'ops'
    sqlsync --principal ops --source crm --dest warehouse

    # Drop and rebuild destination tables that already exist
    sqlsync --principal ops --source crm --dest warehouse --force

    # Use another connection registry
    sqlsync --connections ./connections.json --principal ops --source a --dest b

Connection definitions come from SQLSYNC_CONNECTIONS (or --connections);
credentials from the encrypted store at SQLSYNC_CREDENTIALS unlocked by
SQLSYNC_MASTER_KEY, or SQLSYNC_CRED_<REF>_USER/_PASSWORD variables.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from config.settings import get_config
from core.connection_provider import ConnectionRegistry
from core.errors import SyncError, sanitize_message
from core.models import SyncJob
from core.orchestrator import SyncOrchestrator
from extensions.dialects import registry
from security.credential_store import CredentialStore

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def build_response(code: int, message: str, value: Any = None) -> Dict[str, Any]:
    """Response envelope shared by every outcome"""
    return {'code': code, 'message': message, 'value': value}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sqlsync", description="SQLSync - replicate tables between databases")
    parser.add_argument("--principal", help="Namespace the connection names are looked up under")
    parser.add_argument("--source", help="Source connection name")
    parser.add_argument("--dest", help="Destination connection name")
    parser.add_argument("--force", action="store_true", help="Drop and recreate destination tables that already exist")
    parser.add_argument("--connections", help="Connection registry JSON file (default: SQLSYNC_CONNECTIONS)")
    parser.add_argument("--log-level", choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], type=str.upper,
                        help="Log level (default: SQLSYNC_LOG_LEVEL)")
    parser.add_argument("--list-dialects", action="store_true", help="List supported database vendors and exit")
    return parser


def run_job(args, config) -> Dict[str, Any]:
    credential_store = CredentialStore(str(config.credentials_file), config.master_key)
    provider = ConnectionRegistry.from_file(args.connections or config.connections_file,
                                            credential_store=credential_store)
    job = SyncJob(principal=args.principal, source=args.source,
                  destination=args.dest, force_recreate=args.force)
    report = SyncOrchestrator(provider).run(job)
    return report.to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = get_config()

    logging.basicConfig(level=getattr(logging, args.log_level or config.log_level, logging.INFO),
                        format=LOG_FORMAT)

    if args.list_dialects:
        value = {'dialects': registry.available(), 'aliases': registry.aliases()}
        print(json.dumps(build_response(200, "OK", value), indent=2))
        return 0

    missing = [flag for flag, value in (('--principal', args.principal), ('--source', args.source),
                                        ('--dest', args.dest)) if not value]
    if missing:
        parser.error(f"the following arguments are required: {', '.join(missing)}")

    try:
        value = run_job(args, config)
    except SyncError as e:
        logger.error(f"Fatal error: {e.message}")
        print(json.dumps(build_response(500, e.message), indent=2))
        return 1
    except Exception as e:
        message = sanitize_message(str(e))
        logger.exception(f"Fatal error: {message}")
        print(json.dumps(build_response(500, message), indent=2))
        return 1

    print(json.dumps(build_response(200, "OK", value), indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
