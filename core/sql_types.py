import re
from enum import IntEnum
from typing import Dict, Tuple, Optional


class SQLType(IntEnum):
    """Generic column type codes (X/Open CLI numbering)"""
    # Numeric
    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    BOOLEAN = 16

    # String
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    NCHAR = -15
    NVARCHAR = -9
    LONGNVARCHAR = -16
    CLOB = 2005
    NCLOB = 2011

    # Binary
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    BLOB = 2004

    # Date/Time
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    TIME_WITH_TIMEZONE = 2013
    TIMESTAMP_WITH_TIMEZONE = 2014

    # Fallback
    NULL = 0
    OTHER = 1111


class TypeRegistry:
    # Native type name -> generic code, per dialect.
    # Keys are lower case base names; exact full-string keys (e.g. "tinyint(1)") win.
    NATIVE_TO_SQLTYPE: Dict[str, Dict[str, SQLType]] = {
        'postgresql': {
            'smallint': SQLType.SMALLINT,
            'int2': SQLType.SMALLINT,
            'integer': SQLType.INTEGER,
            'int': SQLType.INTEGER,
            'int4': SQLType.INTEGER,
            'serial': SQLType.INTEGER,
            'bigint': SQLType.BIGINT,
            'int8': SQLType.BIGINT,
            'bigserial': SQLType.BIGINT,
            'numeric': SQLType.NUMERIC,
            'decimal': SQLType.DECIMAL,
            'real': SQLType.REAL,
            'float4': SQLType.REAL,
            'double precision': SQLType.DOUBLE,
            'float8': SQLType.DOUBLE,
            'money': SQLType.DOUBLE,
            'character': SQLType.CHAR,
            'char': SQLType.CHAR,
            'bpchar': SQLType.CHAR,
            'character varying': SQLType.VARCHAR,
            'varchar': SQLType.VARCHAR,
            'text': SQLType.LONGVARCHAR,
            'uuid': SQLType.CHAR,
            'json': SQLType.LONGVARCHAR,
            'jsonb': SQLType.LONGVARCHAR,
            'xml': SQLType.LONGVARCHAR,
            'bytea': SQLType.LONGVARBINARY,
            'boolean': SQLType.BOOLEAN,
            'bool': SQLType.BOOLEAN,
            'bit': SQLType.BIT,
            'date': SQLType.DATE,
            'time': SQLType.TIME,
            'time without time zone': SQLType.TIME,
            'time with time zone': SQLType.TIME_WITH_TIMEZONE,
            'timestamp': SQLType.TIMESTAMP,
            'timestamp without time zone': SQLType.TIMESTAMP,
            'timestamp with time zone': SQLType.TIMESTAMP_WITH_TIMEZONE,
            'timestamptz': SQLType.TIMESTAMP_WITH_TIMEZONE,
        },
        'mysql': {
            'tinyint(1)': SQLType.BIT,
            'bit': SQLType.BIT,
            'bool': SQLType.BOOLEAN,
            'boolean': SQLType.BOOLEAN,
            'tinyint': SQLType.TINYINT,
            'smallint': SQLType.SMALLINT,
            'mediumint': SQLType.INTEGER,
            'int': SQLType.INTEGER,
            'integer': SQLType.INTEGER,
            'bigint': SQLType.BIGINT,
            'decimal': SQLType.DECIMAL,
            'numeric': SQLType.DECIMAL,
            'float': SQLType.REAL,
            'double': SQLType.DOUBLE,
            'char': SQLType.CHAR,
            'varchar': SQLType.VARCHAR,
            'tinytext': SQLType.VARCHAR,
            'text': SQLType.LONGVARCHAR,
            'mediumtext': SQLType.LONGVARCHAR,
            'longtext': SQLType.LONGVARCHAR,
            'json': SQLType.LONGVARCHAR,
            'enum': SQLType.CHAR,
            'set': SQLType.CHAR,
            'binary': SQLType.BINARY,
            'varbinary': SQLType.VARBINARY,
            'tinyblob': SQLType.VARBINARY,
            'blob': SQLType.LONGVARBINARY,
            'mediumblob': SQLType.LONGVARBINARY,
            'longblob': SQLType.LONGVARBINARY,
            'date': SQLType.DATE,
            'time': SQLType.TIME,
            'year': SQLType.DATE,
            'datetime': SQLType.TIMESTAMP,
            'timestamp': SQLType.TIMESTAMP,
        },
        'sqlite': {
            'integer': SQLType.INTEGER,
            'int': SQLType.INTEGER,
            'tinyint': SQLType.TINYINT,
            'smallint': SQLType.SMALLINT,
            'mediumint': SQLType.INTEGER,
            'bigint': SQLType.BIGINT,
            'real': SQLType.REAL,
            'double': SQLType.DOUBLE,
            'double precision': SQLType.DOUBLE,
            'float': SQLType.DOUBLE,
            'numeric': SQLType.NUMERIC,
            'decimal': SQLType.DECIMAL,
            'character': SQLType.CHAR,
            'char': SQLType.CHAR,
            'nchar': SQLType.NCHAR,
            'varchar': SQLType.VARCHAR,
            'nvarchar': SQLType.NVARCHAR,
            'text': SQLType.LONGVARCHAR,
            'clob': SQLType.CLOB,
            'blob': SQLType.BLOB,
            'boolean': SQLType.BOOLEAN,
            'date': SQLType.DATE,
            'time': SQLType.TIME,
            'datetime': SQLType.TIMESTAMP,
            'timestamp': SQLType.TIMESTAMP,
        },
        'mssql': {
            'bit': SQLType.BIT,
            'tinyint': SQLType.TINYINT,
            'smallint': SQLType.SMALLINT,
            'int': SQLType.INTEGER,
            'bigint': SQLType.BIGINT,
            'decimal': SQLType.DECIMAL,
            'numeric': SQLType.NUMERIC,
            'money': SQLType.DECIMAL,
            'smallmoney': SQLType.DECIMAL,
            'float': SQLType.DOUBLE,
            'real': SQLType.REAL,
            'char': SQLType.CHAR,
            'varchar': SQLType.VARCHAR,
            'nchar': SQLType.NCHAR,
            'nvarchar': SQLType.NVARCHAR,
            'text': SQLType.LONGVARCHAR,
            'ntext': SQLType.LONGNVARCHAR,
            'xml': SQLType.LONGNVARCHAR,
            'uniqueidentifier': SQLType.CHAR,
            'binary': SQLType.BINARY,
            'varbinary': SQLType.VARBINARY,
            'image': SQLType.LONGVARBINARY,
            'date': SQLType.DATE,
            'time': SQLType.TIME,
            'datetime': SQLType.TIMESTAMP,
            'datetime2': SQLType.TIMESTAMP,
            'smalldatetime': SQLType.TIMESTAMP,
            'datetimeoffset': SQLType.TIMESTAMP_WITH_TIMEZONE,
        },
        'oracle': {
            'number': SQLType.DECIMAL,
            'float': SQLType.DOUBLE,
            'binary_float': SQLType.REAL,
            'binary_double': SQLType.DOUBLE,
            'char': SQLType.CHAR,
            'nchar': SQLType.NCHAR,
            'varchar2': SQLType.VARCHAR,
            'varchar': SQLType.VARCHAR,
            'nvarchar2': SQLType.NVARCHAR,
            'long': SQLType.LONGVARCHAR,
            'clob': SQLType.CLOB,
            'nclob': SQLType.NCLOB,
            'raw': SQLType.VARBINARY,
            'long raw': SQLType.LONGVARBINARY,
            'blob': SQLType.BLOB,
            'date': SQLType.TIMESTAMP,
            'timestamp': SQLType.TIMESTAMP,
            'timestamp with time zone': SQLType.TIMESTAMP_WITH_TIMEZONE,
            'timestamp with local time zone': SQLType.TIMESTAMP_WITH_TIMEZONE,
        },
    }

    ALIASES = {
        'postgres': 'postgresql',
        'mariadb': 'mysql',
        'sqlserver': 'mssql',
    }

    @staticmethod
    def map_to_sql_type(dialect: str, native_type: str) -> Tuple[SQLType, Optional[int], Optional[int]]:
        """Map a native column type to (generic code, precision, scale).

        Precision and scale are those embedded in the type string, if any.
        """
        dialect_lower = dialect.lower()
        dialect_lower = TypeRegistry.ALIASES.get(dialect_lower, dialect_lower)
        native_lower = (native_type or '').lower().strip()

        base_type, precision, scale = TypeRegistry.parse_type_string(native_lower)

        mapping = TypeRegistry.NATIVE_TO_SQLTYPE.get(dialect_lower)
        if not mapping:
            return (SQLType.OTHER, precision, scale)

        # 1. Exact match of the full string (e.g. "tinyint(1)")
        sql_type = mapping.get(native_lower)

        # 2. Base type (e.g. "tinyint")
        if sql_type is None:
            sql_type = mapping.get(base_type)

        # 3. Prefix match for decorated names (e.g. "int unsigned"), whole words only
        if sql_type is None:
            for key, val in mapping.items():
                if base_type.startswith(key + ' '):
                    sql_type = val
                    break

        if sql_type is None:
            return (SQLType.OTHER, precision, scale)
        return (sql_type, precision, scale)

    @staticmethod
    def parse_type_string(type_str: str) -> Tuple[str, Optional[int], Optional[int]]:
        """Parse 'varchar(255)' -> ('varchar', 255, None)
        Also handles 'timestamp(6) with time zone' -> ('timestamp with time zone', 6, None)
        """
        match = re.match(r'([a-zA-Z0-9_]+)\s*(?:\((\d+)(?:\s*,\s*(\d+))?\))?\s*(.*)', type_str.strip())
        if not match:
            return (type_str.strip(), None, None)

        base_prefix = match.group(1).strip()
        precision = int(match.group(2)) if match.group(2) else None
        scale = int(match.group(3)) if match.group(3) else None
        trailing = match.group(4).strip() if match.group(4) else ""

        base = (base_prefix + ' ' + trailing).strip() if trailing else base_prefix
        return (base, precision, scale)
