"""
Column information abstraction across database backends.
"""
import logging
from typing import Any, Self

from dbarrow.adapters.type_mapping import resolve_sql_type
from dbarrow.sql_types import SqlDataType, SqlType

logger = logging.getLogger(__name__)

__all__ = [
    'Column',
    'columns_from_cursor_description',
]


def _positive(*values: int | None) -> int:
    """First positive value, or 0."""
    for value in values:
        if value is not None and value > 0:
            return value
    return 0


class Column:
    """Representation of a source column with its native type and metadata

    Technical implementation details:
    - Encapsulates driver specific column metadata (type_code, sizes, precision, scale)
    - Normalizes type_code into an ODBC SqlDataType via resolve_sql_type
    - Exposes `lazy_sql_type` and `lazy_display_size`, the accessors consumed
      by the strategy catalog

    Database compatibility:
    - PostgreSQL: psycopg column objects with OIDs as type codes
    - SQLite: description tuples, usually without type codes
    - ODBC: pyodbc description tuples with Python types as type codes
    """

    def __init__(self,
                 name: str,
                 type_code: Any,
                 display_size: int | None = None,
                 internal_size: int | None = None,
                 precision: int | None = None,
                 scale: int | None = None,
                 nullable: bool | None = None,
                 sql_data_type: SqlDataType | None = None):
        """
        Initialize column information

        Args:
            name: Display name of the column
            type_code: Database-specific type code
            display_size: Maximum display size (character count)
            internal_size: Internal storage size (bytes)
            precision: Numeric precision (for numeric types)
            scale: Numeric scale (for numeric types)
            nullable: Whether the column allows NULL values
            sql_data_type: Native type, derived from the other arguments if omitted
        """
        self.name = name
        self.type_code = type_code
        self.display_size = display_size
        self.internal_size = internal_size
        self.precision = precision
        self.scale = scale
        self.nullable = nullable
        self.sql_data_type = sql_data_type or self._sql_data_type(resolve_sql_type(None, type_code))

    def _sql_data_type(self, sql_type: SqlType) -> SqlDataType:
        if sql_type in {SqlType.NUMERIC, SqlType.DECIMAL}:
            return SqlDataType(sql_type, _positive(self.precision), _positive(self.scale))
        if sql_type in {SqlType.TIMESTAMP, SqlType.TIME}:
            return SqlDataType(sql_type, _positive(self.internal_size), _positive(self.scale))
        return SqlDataType(sql_type, _positive(self.internal_size, self.display_size))

    @classmethod
    def from_cursor_description(cls, description_item: Any, dialect: str | None) -> Self:
        """Create a Column from cursor description item.

        Args:
            description_item: One item from cursor.description
            dialect: Database type ('postgresql', 'sqlite', 'odbc') or None

        Returns
            Column instance
        """
        if dialect == 'postgresql':
            column_info = cls._extract_postgres_column_info(description_item)
        else:
            column_info = cls._extract_tuple_column_info(description_item)

        column = cls(**column_info)
        column.sql_data_type = column._sql_data_type(resolve_sql_type(dialect, column.type_code))
        logger.debug(f'Column {column.name!r} described as {column.sql_data_type!r}')
        return column

    @classmethod
    def _extract_postgres_column_info(cls, description_item: Any) -> dict:
        """Extract column information from a psycopg column object.
        """
        return {
            'name': getattr(description_item, 'name', None),
            'type_code': getattr(description_item, 'type_code', None),
            'display_size': getattr(description_item, 'display_size', None),
            'internal_size': getattr(description_item, 'internal_size', None),
            'precision': getattr(description_item, 'precision', None),
            'scale': getattr(description_item, 'scale', None),
            'nullable': None,
            }

    @classmethod
    def _extract_tuple_column_info(cls, description_item: Any) -> dict:
        """Extract column information from a DB-API description 7-tuple.
        """
        item = tuple(description_item) + (None,) * (7 - len(description_item))
        return {
            'name': item[0],
            'type_code': item[1],
            'display_size': item[2],
            'internal_size': item[3],
            'precision': item[4],
            'scale': item[5],
            'nullable': None if item[6] is None else bool(item[6]),
            }

    def lazy_sql_type(self) -> SqlDataType:
        """Native type of the column."""
        return self.sql_data_type

    def lazy_display_size(self) -> int:
        """Display size reported for the column, 0 if unknown."""
        return _positive(self.display_size, self.sql_data_type.display_size())

    def __repr__(self) -> str:
        return f'Column(name={self.name!r}, type_code={self.type_code!r}, sql_data_type={self.sql_data_type!r})'

    @staticmethod
    def get_names(columns: list[Self]) -> list[str]:
        """Get column names from a list of Column objects.
        """
        return [col.name for col in columns]


def columns_from_cursor_description(cursor: Any, dialect: str | None) -> list[Column]:
    """Create Column objects directly from a cursor description.

    Args:
        cursor: Database cursor with a description attribute
        dialect: Database type ('postgresql', 'sqlite', 'odbc') or None

    Returns
        List of Column objects
    """
    if cursor.description is None:
        return []

    return [Column.from_cursor_description(desc_item, dialect) for desc_item in cursor.description]
