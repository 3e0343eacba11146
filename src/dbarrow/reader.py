"""
Reading DB-API result sets into Arrow record batches.

ColumnConverter binds one strategy and one transit buffer to every column of
a result set. BatchReader drives it with rows fetched from a cursor, acting
as the buffer-filling side of the strategy contract for DB-API drivers.
"""
import decimal
import functools
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any

import more_itertools
import pyarrow as pa
from dbarrow.adapters.column_info import Column, columns_from_cursor_description
from dbarrow.adapters.type_mapping import arrow_schema_from
from dbarrow.buffers import ColumnBuffer
from dbarrow.exceptions import ColumnFailure
from dbarrow.options import BufferAllocationOptions, arrow_table_loader
from dbarrow.strategy import ColumnStrategy, choose_column_strategy
from dbarrow.utils import get_dialect_name

logger = logging.getLogger(__name__)

__all__ = [
    'DEFAULT_BATCH_SIZE',
    'ColumnConverter',
    'BatchReader',
    'read_arrow_batches',
]

DEFAULT_BATCH_SIZE = 65_535


def _decimal_text(value: Any, scale: int) -> str | None:
    """Render a decimal with exactly `scale` fractional digits, as a driver would.

    >>> _decimal_text(decimal.Decimal('1.5'), 2)
    '1.50'
    >>> _decimal_text(-3, 1)
    '-3.0'
    """
    if value is None:
        return None
    if not isinstance(value, decimal.Decimal):
        value = decimal.Decimal(str(value))
    return f'{value:.{scale}f}'


class ColumnConverter:
    """Strategies and transit buffers for all columns of a result set.

    Strategy failures are reported as ColumnError naming the column and its
    position in the schema.
    """

    def __init__(self, schema: pa.Schema, columns: Sequence[Column],
                 options: BufferAllocationOptions | None = None) -> None:
        if len(schema) != len(columns):
            raise ValueError(f'Schema has {len(schema)} fields, but the result set {len(columns)} columns')
        self.schema = schema
        self.columns = list(columns)
        self.options = options or BufferAllocationOptions()
        self.strategies: list[ColumnStrategy] = []
        for index, (field, column) in enumerate(zip(schema, self.columns)):
            try:
                strategy = choose_column_strategy(
                    field,
                    functools.cache(column.lazy_sql_type),
                    functools.cache(column.lazy_display_size),
                    self.options,
                )
            except ColumnFailure as e:
                raise e.into_column_error(field.name, index) from e
            self.strategies.append(strategy)

    def allocate_buffers(self, capacity: int) -> list[ColumnBuffer]:
        """Allocate one transit buffer per column for batches of up to `capacity` rows.
        """
        buffers = []
        for index, (field, strategy) in enumerate(zip(self.schema, self.strategies)):
            try:
                buffer = ColumnBuffer.allocate(
                    strategy.buffer_description(), capacity,
                    fallible=self.options.fallible_allocations,
                    max_bytes=self.options.max_buffer_bytes,
                )
            except ColumnFailure as e:
                raise e.into_column_error(field.name, index) from e
            buffers.append(buffer)
        return buffers

    def _column_values(self, rows: Sequence[Any]) -> list[Sequence[Any]]:
        if isinstance(rows[0], Mapping):
            names = Column.get_names(self.columns)
            return [[row[name] for row in rows] for name in names]
        return list(zip(*rows))

    def fill_buffers(self, buffers: list[ColumnBuffer], rows: Sequence[Any]) -> None:
        """Write a batch of rows into the transit buffers.
        """
        if not rows:
            for buffer in buffers:
                buffer.num_rows = 0
            return
        for field, buffer, values in zip(self.schema, buffers, self._column_values(rows)):
            if pa.types.is_decimal(field.type):
                values = [_decimal_text(value, field.type.scale) for value in values]
            buffer.fill(values)

    def to_record_batch(self, buffers: list[ColumnBuffer]) -> pa.RecordBatch:
        """Convert filled transit buffers into a record batch.
        """
        arrays = [strategy.fill_arrow_array(buffer.view())
                  for strategy, buffer in zip(self.strategies, buffers)]
        return pa.RecordBatch.from_arrays(arrays, schema=self.schema)


class BatchReader:
    """Iterates over the result set of a cursor as Arrow record batches.

    Args:
        cursor: DB-API cursor with an executed query
        schema: Arrow schema of the result, inferred from the cursor
            description if omitted
        batch_size: maximum number of rows per record batch
        options: transit buffer limits
        table_name: table name used to look up configured type overrides
    """

    def __init__(self, cursor: Any, schema: pa.Schema | None = None,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 options: BufferAllocationOptions | None = None,
                 table_name: str | None = None) -> None:
        if cursor.description is None:
            raise ValueError('Cursor has no result set')
        if batch_size <= 0:
            raise ValueError(f'batch_size must be positive, got {batch_size}')
        self.cursor = cursor
        self.batch_size = batch_size
        dialect = get_dialect_name(cursor)
        columns = columns_from_cursor_description(cursor, dialect)
        if schema is None:
            schema = arrow_schema_from(columns, dialect, table_name)
            logger.debug(f'Inferred schema {schema}')
        self.converter = ColumnConverter(schema, columns, options)
        self._buffers = self.converter.allocate_buffers(batch_size)

    @property
    def schema(self) -> pa.Schema:
        return self.converter.schema

    def __iter__(self) -> Iterator[pa.RecordBatch]:
        for rows in more_itertools.chunked(self.cursor, self.batch_size):
            self.converter.fill_buffers(self._buffers, rows)
            yield self.converter.to_record_batch(self._buffers)

    def read_all(self) -> pa.Table:
        """Read the remaining rows into a single table."""
        return arrow_table_loader(self, self.schema)

    def load(self, data_loader: Callable[..., Any] = arrow_table_loader) -> Any:
        """Read the remaining rows with a data loader from `dbarrow.options`."""
        return data_loader(self, self.schema)


def read_arrow_batches(cursor: Any, schema: pa.Schema | None = None,
                       **kwargs: Any) -> Iterable[pa.RecordBatch]:
    """Shortcut for iterating over a BatchReader."""
    return iter(BatchReader(cursor, schema, **kwargs))
