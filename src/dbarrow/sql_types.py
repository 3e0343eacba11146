"""
Native SQL data types as reported by the data source.

Type codes follow the ODBC `SQL_*` constants so metadata from any DB-API
driver can be normalized into a single descriptor.
"""
from dataclasses import dataclass
from enum import IntEnum

__all__ = [
    'SqlType',
    'SqlDataType',
]


class SqlType(IntEnum):
    """ODBC SQL data type codes"""

    UNKNOWN = 0
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    LONGVARCHAR = -1
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    BIGINT = -5
    TINYINT = -6
    BIT = -7
    WCHAR = -8
    WVARCHAR = -9
    WLONGVARCHAR = -10
    GUID = -11


NARROW_TEXT_TYPES = frozenset({SqlType.CHAR, SqlType.VARCHAR, SqlType.LONGVARCHAR})
WIDE_TEXT_TYPES = frozenset({SqlType.WCHAR, SqlType.WVARCHAR, SqlType.WLONGVARCHAR})
BINARY_TYPES = frozenset({SqlType.BINARY, SqlType.VARBINARY, SqlType.LONGVARBINARY})

# column size (precision) of types with a statically known size
_STATIC_COLUMN_SIZE = {
    SqlType.BIT: 1,
    SqlType.TINYINT: 3,
    SqlType.SMALLINT: 5,
    SqlType.INTEGER: 10,
    SqlType.BIGINT: 19,
    SqlType.REAL: 7,
    SqlType.DOUBLE: 15,
    SqlType.DATE: 10,
    SqlType.GUID: 36,
    }

_STATIC_DISPLAY_SIZE = {
    SqlType.BIT: 1,
    SqlType.TINYINT: 4,
    SqlType.SMALLINT: 6,
    SqlType.INTEGER: 11,
    SqlType.BIGINT: 20,
    SqlType.REAL: 14,
    SqlType.FLOAT: 24,
    SqlType.DOUBLE: 24,
    SqlType.DATE: 10,
    SqlType.GUID: 36,
    }


@dataclass(frozen=True)
class SqlDataType:
    """Native type of a source column.

    `size` is the column size reported by the driver: the length in characters
    for text, in bytes for binary data and the precision for numbers. Zero
    means the driver could not report an upper bound.
    """
    sql_type: SqlType = SqlType.UNKNOWN
    size: int = 0
    decimal_digits: int = 0

    def __repr__(self) -> str:
        return (f'SqlDataType({self.sql_type.name}, size={self.size}, '
                f'decimal_digits={self.decimal_digits})')

    def column_size(self) -> int:
        """Size of the column as reported by the data source.

        >>> SqlDataType(SqlType.VARBINARY, 16).column_size()
        16
        >>> SqlDataType(SqlType.INTEGER).column_size()
        10
        >>> SqlDataType(SqlType.LONGVARBINARY).column_size()
        0
        """
        if self.sql_type in _STATIC_COLUMN_SIZE:
            return _STATIC_COLUMN_SIZE[self.sql_type]
        if self.sql_type == SqlType.TIMESTAMP:
            return 19 + (self.decimal_digits + 1 if self.decimal_digits else 0)
        if self.sql_type == SqlType.TIME:
            return 8 + (self.decimal_digits + 1 if self.decimal_digits else 0)
        return max(self.size, 0)

    def display_size(self) -> int | None:
        """Maximum number of characters needed to display a value, if statically known.

        >>> SqlDataType(SqlType.DECIMAL, 10, 2).display_size()
        12
        >>> SqlDataType(SqlType.TIMESTAMP, decimal_digits=3).display_size()
        23
        >>> SqlDataType(SqlType.UNKNOWN).display_size() is None
        True
        """
        if self.sql_type in _STATIC_DISPLAY_SIZE:
            return _STATIC_DISPLAY_SIZE[self.sql_type]
        if self.sql_type in {SqlType.NUMERIC, SqlType.DECIMAL}:
            return self.size + 2 if self.size else None
        if self.sql_type in {SqlType.TIMESTAMP, SqlType.TIME}:
            return self.column_size()
        if self.sql_type in NARROW_TEXT_TYPES | WIDE_TEXT_TYPES:
            return self.size
        if self.sql_type in BINARY_TYPES:
            return self.size * 2
        return None

    def utf8_len(self) -> int | None:
        """Upper bound in bytes of a UTF-8 encoded value, if known from the type alone.

        Narrow character columns are assumed to report their length in bytes
        of a UTF-8 encoding. Wide columns report characters, each of which may
        take up to four bytes.

        >>> SqlDataType(SqlType.VARCHAR, 50).utf8_len()
        50
        >>> SqlDataType(SqlType.WVARCHAR, 50).utf8_len()
        200
        >>> SqlDataType(SqlType.INTEGER).utf8_len() is None
        True
        """
        if self.sql_type in NARROW_TEXT_TYPES:
            return max(self.size, 0)
        if self.sql_type in WIDE_TEXT_TYPES:
            return max(self.size, 0) * 4
        return None


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
