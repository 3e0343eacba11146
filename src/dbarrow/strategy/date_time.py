"""
Strategies converting ODBC date and timestamp structs into Arrow temporal types.

Dates become days since the UNIX epoch. Timestamps become counts of the target
unit since the epoch, the sub-second fraction is truncated to the unit.
"""
from abc import ABC, abstractmethod

import numpy as np
import pyarrow as pa
from dbarrow.buffers import DATE_STRUCT, TIMESTAMP_STRUCT, BufferDescription
from dbarrow.buffers import BufferKind, ColumnView
from dbarrow.strategy.base import ColumnStrategy

__all__ = [
    'Conversion',
    'DateConversion',
    'TimestampSecConversion',
    'TimestampMsConversion',
    'TimestampUsConversion',
    'TimestampNsConversion',
    'WithConversion',
    'with_conversion',
    'rescale_nanoseconds',
]

NANOS_PER_UNIT = {
    's': 1_000_000_000,
    'ms': 1_000_000,
    'us': 1_000,
    'ns': 1,
    }

SECONDS_PER_DAY = 86_400


def rescale_nanoseconds(nanoseconds, unit: str):
    """Rescale nanoseconds into `unit`, truncating the remainder.

    >>> rescale_nanoseconds(1_500_000_000, 'us')
    1500000
    >>> rescale_nanoseconds(1_500_000_000, 's')
    1
    """
    return nanoseconds // NANOS_PER_UNIT[unit]


def days_since_epoch(values: np.ndarray) -> np.ndarray:
    """Days since 1970-01-01 for an array of date or timestamp structs.
    """
    months = (values['year'].astype(np.int64) - 1970) * 12 + values['month'].astype(np.int64) - 1
    first_of_month = months.astype('datetime64[M]').astype('datetime64[D]')
    days = first_of_month + (values['day'].astype(np.int64) - 1).astype('timedelta64[D]')
    return days.astype(np.int64)


class Conversion(ABC):
    """Pure conversion of transit values into the integer representation of an Arrow type.
    """
    source_dtype: np.dtype
    arrow_type: pa.DataType
    storage_type: pa.DataType

    @abstractmethod
    def convert(self, values: np.ndarray) -> np.ndarray:
        """Convert every element; values of missing rows are ignored by the caller.
        """


class DateConversion(Conversion):

    source_dtype = DATE_STRUCT
    arrow_type = pa.date32()
    storage_type = pa.int32()

    def convert(self, values: np.ndarray) -> np.ndarray:
        return days_since_epoch(values).astype(np.int32)


class TimestampConversion(Conversion):

    source_dtype = TIMESTAMP_STRUCT
    storage_type = pa.int64()
    unit: str

    @property
    def arrow_type(self) -> pa.DataType:
        return pa.timestamp(self.unit)

    def convert(self, values: np.ndarray) -> np.ndarray:
        seconds = (days_since_epoch(values) * SECONDS_PER_DAY
                   + values['hour'].astype(np.int64) * 3600
                   + values['minute'].astype(np.int64) * 60
                   + values['second'].astype(np.int64))
        per_second = NANOS_PER_UNIT['s'] // NANOS_PER_UNIT[self.unit]
        fraction = rescale_nanoseconds(values['fraction'].astype(np.int64), self.unit)
        return seconds * per_second + fraction


class TimestampSecConversion(TimestampConversion):
    unit = 's'


class TimestampMsConversion(TimestampConversion):
    unit = 'ms'


class TimestampUsConversion(TimestampConversion):
    unit = 'us'


class TimestampNsConversion(TimestampConversion):
    unit = 'ns'


class WithConversion(ColumnStrategy):
    """Applies a conversion to each present value and copies nulls forward.
    """

    def __init__(self, nullable: bool, conversion: Conversion,
                 arrow_type: pa.DataType | None = None) -> None:
        self.nullable = nullable
        self.conversion = conversion
        self.arrow_type = arrow_type or conversion.arrow_type

    def buffer_description(self) -> BufferDescription:
        return BufferDescription(nullable=self.nullable,
                                 kind=BufferKind.fixed(self.conversion.source_dtype))

    def _fill(self, column_view: ColumnView) -> pa.Array:
        converted = self.conversion.convert(column_view.values)
        storage = pa.array(converted, type=self.conversion.storage_type,
                           mask=column_view.null_mask())
        return storage.view(self.arrow_type)


def with_conversion(nullable: bool, conversion: type[Conversion] | Conversion,
                    arrow_type: pa.DataType | None = None) -> ColumnStrategy:
    """Strategy converting each value with `conversion`.
    """
    if isinstance(conversion, type):
        conversion = conversion()
    return WithConversion(nullable, conversion, arrow_type)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
