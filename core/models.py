from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional

from core.sql_types import SQLType


@dataclass(frozen=True)
class SyncJob:
    """One source -> destination sync request. Immutable input to a single run."""
    principal: str
    source: str
    destination: str
    force_recreate: bool = False


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Where a named connection lives and which credential opens it"""
    vendor: str
    database: str
    host: Optional[str] = None
    port: Optional[int] = None
    credential: Optional[str] = None  # reference resolved by the credential store


@dataclass(frozen=True)
class Credential:
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)


@dataclass
class Table:
    """Table row from a dialect's table-list query"""
    name: str
    create_time: Any = None
    update_time: Any = None
    comment: Optional[str] = None

    ROW_ALIASES = {
        'table_name': 'name',
        'table_comment': 'comment',
    }


@dataclass
class Column:
    """Column definition; generic_type is an SQLType code"""
    name: str
    generic_type: int = SQLType.OTHER
    precision: int = 0
    scale: int = 0
    native_type: Optional[str] = None


@dataclass
class TypeInfo:
    """One entry of a destination's self-reported type catalog"""
    native_type_name: str
    generic_type: int
    default_precision: int = 0
    create_params: Optional[str] = None
    default_scale: int = 0

    ROW_ALIASES = {
        'type_name': 'native_type_name',
        'data_type': 'generic_type',
        'precision': 'default_precision',
        'minimum_scale': 'default_scale',
    }


class TableStatus(Enum):
    CREATED = "created"
    REUSED = "reused"
    SKIPPED = "skipped"


@dataclass
class SchemaResult:
    """Outcome of schema replication for one table"""
    table: str
    status: TableStatus
    columns: List[Column] = field(default_factory=list)
    cause: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.status == TableStatus.SKIPPED


@dataclass
class TableSyncResult:
    table: str
    status: TableStatus
    columns: List[str] = field(default_factory=list)
    rows_copied: int = 0
    pages: int = 0
    cause: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['status'] = self.status.value
        return result


@dataclass
class SyncReport:
    """Summary of one completed job"""
    job: SyncJob
    tables: List[TableSyncResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def rows_copied(self) -> int:
        return sum(t.rows_copied for t in self.tables)

    def count(self, status: TableStatus) -> int:
        return sum(1 for t in self.tables if t.status == status)

    @property
    def tables_created(self) -> int:
        return self.count(TableStatus.CREATED)

    @property
    def tables_reused(self) -> int:
        return self.count(TableStatus.REUSED)

    @property
    def tables_skipped(self) -> int:
        return self.count(TableStatus.SKIPPED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'principal': self.job.principal,
            'source': self.job.source,
            'destination': self.job.destination,
            'force_recreate': self.job.force_recreate,
            'started_at': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
            'tables': [t.to_dict() for t in self.tables],
            'summary': {
                'tables': len(self.tables),
                'created': self.tables_created,
                'reused': self.tables_reused,
                'skipped': self.tables_skipped,
                'rows_copied': self.rows_copied,
            },
        }


@dataclass
class Endpoint:
    """One side of a job: an open connection and the dialect that speaks to it"""
    name: str
    descriptor: ConnectionDescriptor
    dialect: Any
    connection: Any = field(default=None, repr=False)

    @property
    def database(self) -> str:
        return self.descriptor.database
