"""Low-level utilities with no internal dependencies.
"""
import logging
from typing import Any

logger = logging.getLogger(__name__)


def get_dialect_name(obj: Any) -> str | None:
    """Get dialect name for a DB-API cursor or connection.

    Returns None if the dialect cannot be determined; type codes are then
    interpreted as Python types or ODBC type codes.
    """
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return dialect.lower()
        return str(dialect.name).lower()

    name = _dialect_from_type(obj)
    if name is None and getattr(obj, 'connection', None) is not None:
        name = _dialect_from_type(obj.connection)
    if name is None:
        logger.debug(f'Cannot determine dialect for {type(obj)}')
    return name


def _dialect_from_type(obj: Any) -> str | None:
    type_name = f'{type(obj).__module__}.{type(obj).__name__}'
    if 'psycopg' in type_name:
        return 'postgresql'
    if 'sqlite3' in type_name:
        return 'sqlite'
    if 'pyodbc' in type_name:
        return 'odbc'
    return None
