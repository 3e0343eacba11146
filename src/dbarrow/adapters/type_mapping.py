"""
Type resolution from source column metadata to Arrow types.

Two steps are involved:

1. The database-specific type code found in `cursor.description` (a
   PostgreSQL OID, a SQLite declared type name, or a Python type as reported
   by pyodbc) is normalized into an ODBC SqlType.
2. The resulting SqlDataType is mapped to the Arrow type the column is
   fetched as, unless a configured override exists for the column.

The module focuses solely on type identification, not conversion.
"""
import datetime
import decimal
import logging
import re
import uuid
from typing import Any

import pyarrow as pa
from dbarrow.config.type_mapping import TypeMappingConfig
from dbarrow.sql_types import SqlDataType, SqlType

logger = logging.getLogger(__name__)

__all__ = [
    'resolve_sql_type',
    'arrow_type_from_sql',
    'parse_arrow_type',
    'arrow_schema_from',
]

# PostgreSQL type OIDs
postgres_types = {
    16: SqlType.BIT,             # bool
    17: SqlType.VARBINARY,       # bytea
    18: SqlType.CHAR,            # "char"
    19: SqlType.VARCHAR,         # name
    20: SqlType.BIGINT,          # int8
    21: SqlType.SMALLINT,        # int2
    23: SqlType.INTEGER,         # int4
    25: SqlType.LONGVARCHAR,     # text
    114: SqlType.LONGVARCHAR,    # json
    700: SqlType.REAL,           # float4
    701: SqlType.DOUBLE,         # float8
    1042: SqlType.CHAR,          # bpchar
    1043: SqlType.VARCHAR,       # varchar
    1082: SqlType.DATE,          # date
    1083: SqlType.TIME,          # time
    1114: SqlType.TIMESTAMP,     # timestamp
    1184: SqlType.TIMESTAMP,     # timestamptz
    1700: SqlType.NUMERIC,       # numeric
    2950: SqlType.GUID,          # uuid
    3802: SqlType.LONGVARBINARY,  # jsonb
    }

sqlite_types = {
    'INTEGER': SqlType.BIGINT,
    'INT': SqlType.BIGINT,
    'REAL': SqlType.DOUBLE,
    'TEXT': SqlType.LONGVARCHAR,
    'VARCHAR': SqlType.VARCHAR,
    'CHAR': SqlType.CHAR,
    'BLOB': SqlType.LONGVARBINARY,
    'NUMERIC': SqlType.NUMERIC,
    'DECIMAL': SqlType.DECIMAL,
    'BOOLEAN': SqlType.BIT,
    'DATE': SqlType.DATE,
    'DATETIME': SqlType.TIMESTAMP,
    'TIMESTAMP': SqlType.TIMESTAMP,
    'TIME': SqlType.TIME,
    }

# pyodbc reports the Python type a column is returned as
python_types = {
    bool: SqlType.BIT,
    int: SqlType.BIGINT,
    float: SqlType.DOUBLE,
    decimal.Decimal: SqlType.DECIMAL,
    str: SqlType.WVARCHAR,
    bytes: SqlType.VARBINARY,
    bytearray: SqlType.VARBINARY,
    datetime.date: SqlType.DATE,
    datetime.datetime: SqlType.TIMESTAMP,
    datetime.time: SqlType.TIME,
    uuid.UUID: SqlType.GUID,
    }


def resolve_sql_type(dialect: str | None, type_code: Any) -> SqlType:
    """Normalize a database-specific type code into a SqlType.

    >>> resolve_sql_type('postgresql', 23)
    <SqlType.INTEGER: 4>
    >>> resolve_sql_type('sqlite', 'varchar(20)')
    <SqlType.VARCHAR: 12>
    >>> resolve_sql_type(None, str)
    <SqlType.WVARCHAR: -9>
    >>> resolve_sql_type('sqlite', None)
    <SqlType.UNKNOWN: 0>
    """
    if type_code is None:
        return SqlType.UNKNOWN
    if isinstance(type_code, SqlType):
        return type_code
    if isinstance(type_code, type):
        return python_types.get(type_code, SqlType.UNKNOWN)
    if dialect == 'postgresql':
        return postgres_types.get(type_code, SqlType.UNKNOWN)
    if dialect == 'sqlite' and isinstance(type_code, str):
        base_type = type_code.split('(')[0].strip().upper()
        return sqlite_types.get(base_type, SqlType.UNKNOWN)
    if isinstance(type_code, int):
        try:
            return SqlType(type_code)
        except ValueError:
            pass
    logger.debug(f'Unknown type code {type_code!r} for dialect {dialect}')
    return SqlType.UNKNOWN


def _integer_type_for_precision(precision: int) -> pa.DataType:
    if precision < 3:
        return pa.int8()
    if precision < 5:
        return pa.int16()
    if precision < 10:
        return pa.int32()
    return pa.int64()


def _timestamp_unit(decimal_digits: int) -> str:
    if decimal_digits == 0:
        return 's'
    if decimal_digits <= 3:
        return 'ms'
    if decimal_digits <= 6:
        return 'us'
    return 'ns'


def arrow_type_from_sql(sql_data_type: SqlDataType) -> pa.DataType:
    """Arrow type a column of the given native type is fetched as.

    >>> arrow_type_from_sql(SqlDataType(SqlType.NUMERIC, 5, 0))
    DataType(int32)
    >>> arrow_type_from_sql(SqlDataType(SqlType.DECIMAL, 10, 2))
    Decimal128Type(decimal128(10, 2))
    >>> arrow_type_from_sql(SqlDataType(SqlType.TIMESTAMP, decimal_digits=6))
    TimestampType(timestamp[us])
    """
    sql_type = sql_data_type.sql_type
    size = sql_data_type.size
    digits = sql_data_type.decimal_digits

    simple = {
        SqlType.BIT: pa.bool_(),
        SqlType.TINYINT: pa.int8(),
        SqlType.SMALLINT: pa.int16(),
        SqlType.INTEGER: pa.int32(),
        SqlType.BIGINT: pa.int64(),
        SqlType.REAL: pa.float32(),
        SqlType.DOUBLE: pa.float64(),
        SqlType.DATE: pa.date32(),
        SqlType.VARBINARY: pa.binary(),
        SqlType.LONGVARBINARY: pa.binary(),
        }
    if sql_type in simple:
        return simple[sql_type]
    if sql_type == SqlType.FLOAT:
        return pa.float32() if 0 < size <= 24 else pa.float64()
    if sql_type in {SqlType.NUMERIC, SqlType.DECIMAL}:
        if digits == 0 and 0 < size < 19:
            return _integer_type_for_precision(size)
        if 0 < size <= 38:
            return pa.decimal128(size, digits)
        return pa.string()
    if sql_type == SqlType.TIMESTAMP:
        return pa.timestamp(_timestamp_unit(digits))
    if sql_type == SqlType.BINARY:
        return pa.binary(size) if size > 0 else pa.binary()
    return pa.string()


_DECIMAL_PATTERN = re.compile(r'^decimal(?:128)?\(\s*(\d+)\s*,\s*(\d+)\s*\)$')
_FIXED_BINARY_PATTERN = re.compile(r'^(?:fixed_size_)?binary[\[(]\s*(\d+)\s*[\])]$')


def parse_arrow_type(name: str) -> pa.DataType:
    """Parse an Arrow type from its textual name.

    >>> parse_arrow_type('decimal128(18, 2)')
    Decimal128Type(decimal128(18, 2))
    >>> parse_arrow_type('binary[16]')
    FixedSizeBinaryType(fixed_size_binary[16])
    >>> parse_arrow_type('timestamp[ms]')
    TimestampType(timestamp[ms])
    """
    name = name.strip().lower()
    if match := _DECIMAL_PATTERN.match(name):
        return pa.decimal128(int(match.group(1)), int(match.group(2)))
    if match := _FIXED_BINARY_PATTERN.match(name):
        return pa.binary(int(match.group(1)))
    return pa.type_for_alias(name)


def arrow_schema_from(columns: list, dialect: str | None = None,
                      table_name: str | None = None) -> pa.Schema:
    """Infer the Arrow schema of a result set from its column metadata.

    Configured overrides from TypeMappingConfig take precedence over the
    native types. Columns of unknown nullability are nullable.
    """
    config = TypeMappingConfig.get_instance()
    fields = []
    for column in columns:
        override = config.get_type_for_column(dialect, table_name, column.name) if dialect else None
        if override:
            arrow_type = parse_arrow_type(override)
        else:
            arrow_type = arrow_type_from_sql(column.sql_data_type)
        nullable = True if column.nullable is None else column.nullable
        fields.append(pa.field(column.name, arrow_type, nullable=nullable))
    return pa.schema(fields)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
