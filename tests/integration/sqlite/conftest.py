"""
Fixtures for SQLite-specific integration tests.
"""
import pyarrow as pa
import pytest


@pytest.fixture
def measurement_schema():
    """Arrow schema matching the measurement table."""
    return pa.schema([
        pa.field('id', pa.int64(), nullable=False),
        pa.field('name', pa.string(), nullable=False),
        pa.field('active', pa.bool_()),
        pa.field('reading', pa.float64()),
        pa.field('price', pa.decimal128(10, 2)),
        pa.field('taken_on', pa.date32()),
        pa.field('taken_at', pa.timestamp('ms')),
        pa.field('payload', pa.binary()),
    ])


@pytest.fixture
def measurement_cursor(sqlite_conn):
    """Cursor over all rows of the measurement table, ordered by id."""
    cursor = sqlite_conn.execute('SELECT * FROM measurement ORDER BY id')
    yield cursor
    cursor.close()
