"""
Transit buffers bound to a data source.

A buffer is described by a BufferDescription before any row data exists. The
driver side fills a ColumnBuffer allocated from that description, and a
conversion strategy reads it back through a ColumnView.

Layout follows ODBC column-wise binding:

- values: one element per row; text and binary rows are fixed width byte
  arrays (text carries an extra terminating zero).
- indicators: one int64 per row holding the length in bytes of a variadic
  value, or NULL_DATA for a missing value. Non-nullable fixed width buffers
  carry no indicators.
"""
import datetime
import decimal
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Self

import dateutil.parser
import numpy as np
from dbarrow.exceptions import TooLarge, TypeConversionError, ZeroSizedColumn

logger = logging.getLogger(__name__)

__all__ = [
    'NULL_DATA',
    'DATE_STRUCT',
    'TIMESTAMP_STRUCT',
    'BufferType',
    'BufferKind',
    'BufferDescription',
    'ColumnBuffer',
    'ColumnView',
    'resolve_buffer_length',
    'check_buffer_size',
]

NULL_DATA = -1

DATE_STRUCT = np.dtype([
    ('year', '<i2'),
    ('month', '<u2'),
    ('day', '<u2'),
])

TIMESTAMP_STRUCT = np.dtype([
    ('year', '<i2'),
    ('month', '<u2'),
    ('day', '<u2'),
    ('hour', '<u2'),
    ('minute', '<u2'),
    ('second', '<u2'),
    ('fraction', '<u4'),  # nanoseconds
])


class BufferType(Enum):
    BIT = 'bit'
    FIXED = 'fixed'
    TEXT = 'text'
    BINARY = 'binary'


@dataclass(frozen=True)
class BufferKind:
    """Shape of the values of a transit buffer.

    Use the factory methods rather than the constructor.
    """
    buffer_type: BufferType
    dtype: np.dtype
    length: int = 0

    @classmethod
    def bit(cls) -> Self:
        return cls(BufferType.BIT, np.dtype(np.uint8), 1)

    @classmethod
    def fixed(cls, dtype: Any) -> Self:
        dtype = np.dtype(dtype)
        return cls(BufferType.FIXED, dtype, dtype.itemsize)

    @classmethod
    def text(cls, max_str_len: int) -> Self:
        return cls(BufferType.TEXT, np.dtype(np.uint8), max_str_len)

    @classmethod
    def binary(cls, length: int) -> Self:
        return cls(BufferType.BINARY, np.dtype(np.uint8), length)

    @property
    def is_variadic(self) -> bool:
        return self.buffer_type in {BufferType.TEXT, BufferType.BINARY}

    def element_size(self) -> int:
        """Size in bytes of one value in the buffer.

        >>> BufferKind.text(10).element_size()
        11
        >>> BufferKind.binary(10).element_size()
        10
        >>> BufferKind.fixed(TIMESTAMP_STRUCT).element_size()
        16
        """
        if self.buffer_type == BufferType.TEXT:
            return self.length + 1
        return self.length


@dataclass(frozen=True)
class BufferDescription:
    """Describes a buffer bound to a column of the data source.
    """
    nullable: bool
    kind: BufferKind

    def has_indicators(self) -> bool:
        return self.nullable or self.kind.is_variadic

    def bytes_per_row(self) -> int:
        """Size in bytes of one row, including its indicator.

        >>> BufferDescription(True, BufferKind.text(10)).bytes_per_row()
        19
        >>> BufferDescription(False, BufferKind.fixed('int32')).bytes_per_row()
        4
        """
        indicator = np.dtype(np.int64).itemsize if self.has_indicators() else 0
        return self.kind.element_size() + indicator


def resolve_buffer_length(reported_len: int, ceiling: int | None, sql_type: Any) -> int:
    """Length of a variadic buffer given the reported size and an optional upper limit.

    >>> resolve_buffer_length(0, 50, 'VARBINARY')
    50
    >>> resolve_buffer_length(10, None, 'VARBINARY')
    10
    >>> resolve_buffer_length(100, 50, 'VARBINARY')
    50
    """
    if reported_len == 0:
        if ceiling is None:
            raise ZeroSizedColumn(sql_type)
        return ceiling
    if ceiling is None:
        return reported_len
    return min(reported_len, ceiling)


def check_buffer_size(num_elements: int, element_size: int, max_bytes: int) -> None:
    """Raise TooLarge if the buffer would exceed `max_bytes`.
    """
    if num_elements * element_size > max_bytes:
        raise TooLarge(num_elements, element_size)


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return dateutil.parser.isoparse(value).date()
    raise TypeError(f'Expected date, got {type(value).__name__}')


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        value = dateutil.parser.isoparse(value)
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(datetime.UTC).replace(tzinfo=None)
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    raise TypeError(f'Expected datetime, got {type(value).__name__}')


def _to_text(value: Any) -> bytes:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    if isinstance(value, decimal.Decimal):
        return format(value, 'f').encode()
    if isinstance(value, datetime.date | datetime.time):
        return value.isoformat().encode()
    return str(value).encode()


def _to_binary(value: Any) -> bytes:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    raise TypeError(f'Expected bytes, got {type(value).__name__}')


class ColumnBuffer:
    """Column-wise transit buffer for up to `capacity` rows.
    """

    def __init__(self, description: BufferDescription, capacity: int) -> None:
        self.description = description
        self.capacity = capacity
        self.num_rows = 0
        kind = description.kind
        if kind.is_variadic:
            self.values = np.zeros((capacity, kind.element_size()), dtype=np.uint8)
        else:
            self.values = np.zeros(capacity, dtype=kind.dtype)
        self.indicators = np.zeros(capacity, dtype=np.int64) if description.has_indicators() else None

    @classmethod
    def allocate(cls, description: BufferDescription, capacity: int,
                 fallible: bool = False, max_bytes: int | None = None) -> Self:
        """Allocate a buffer, raising TooLarge instead of failing hard if `fallible`.
        """
        if not fallible:
            return cls(description, capacity)
        element_size = description.bytes_per_row()
        if max_bytes is not None:
            check_buffer_size(capacity, element_size, max_bytes)
        try:
            return cls(description, capacity)
        except MemoryError as e:
            raise TooLarge(capacity, element_size) from e

    def fill(self, values: Sequence[Any]) -> Self:
        """Write one batch of Python values into the buffer, replacing its content.
        """
        if len(values) > self.capacity:
            raise ValueError(f'Batch of {len(values)} rows exceeds buffer capacity of {self.capacity}')
        for row, value in enumerate(values):
            try:
                self._set_row(row, value)
            except (TypeError, ValueError, OverflowError, decimal.InvalidOperation) as e:
                raise TypeConversionError(f'Unable to write {value!r} of row {row} into {self.description}: {e}') from e
        self.num_rows = len(values)
        return self

    def _set_row(self, row: int, value: Any) -> None:
        kind = self.description.kind
        if value is None:
            if not self.description.nullable:
                raise ValueError('NULL value in a non-nullable column')
            self.indicators[row] = NULL_DATA
            return

        if kind.buffer_type == BufferType.BIT:
            self.values[row] = 1 if value else 0
        elif kind.buffer_type == BufferType.FIXED:
            if kind.dtype == DATE_STRUCT:
                d = _to_date(value)
                self.values[row] = (d.year, d.month, d.day)
            elif kind.dtype == TIMESTAMP_STRUCT:
                dt = _to_datetime(value)
                self.values[row] = (dt.year, dt.month, dt.day, dt.hour, dt.minute,
                                    dt.second, dt.microsecond * 1000)
            else:
                if kind.dtype.kind in 'iu' and isinstance(value, float | decimal.Decimal):
                    if value != int(value):
                        raise ValueError(f'{value!r} is not an integer')
                    value = int(value)
                elif isinstance(value, decimal.Decimal):
                    value = float(value)
                self.values[row] = value
        else:
            data = _to_text(value) if kind.buffer_type == BufferType.TEXT else _to_binary(value)
            stored = data[:kind.length]
            self.values[row, :len(stored)] = np.frombuffer(stored, dtype=np.uint8)
            if kind.buffer_type == BufferType.TEXT:
                self.values[row, len(stored)] = 0
            # full length is reported even if the value had to be truncated
            self.indicators[row] = len(data)
            return

        if self.indicators is not None:
            self.indicators[row] = kind.element_size()

    def view(self) -> 'ColumnView':
        """View of the rows filled by the last batch.
        """
        n = self.num_rows
        indicators = self.indicators[:n] if self.indicators is not None else None
        return ColumnView(self.description, self.values[:n], indicators)


@dataclass
class ColumnView:
    """Read access to the filled part of a transit buffer.
    """
    description: BufferDescription
    values: np.ndarray
    indicators: np.ndarray | None = None

    def __len__(self) -> int:
        return len(self.values)

    def null_mask(self) -> np.ndarray | None:
        """Boolean array marking missing values, or None for non-nullable buffers.
        """
        if not self.description.nullable or self.indicators is None:
            return None
        return self.indicators == NULL_DATA

    def iter_bytes(self) -> Iterator[bytes | None]:
        """Iterate over the values of a text or binary buffer.

        Values larger than the buffer are truncated to its length.
        """
        max_len = self.description.kind.length
        for row, (data, indicator) in enumerate(zip(self.values, self.indicators)):
            if indicator == NULL_DATA:
                yield None
                continue
            if indicator > max_len:
                logger.warning(f'Value in row {row} has {indicator} bytes and was truncated to '
                               f'the buffer length of {max_len}')
                indicator = max_len
            yield data[:indicator].tobytes()
