"""
Column strategy catalog.

Maps the Arrow type of a target field, together with lazily fetched metadata
of the source column, to the strategy converting the column.

The lazy accessors are invoked at most once each, and only for targets whose
buffer size is not statically known (text and variadic binary). Callers
reusing an accessor across calls are responsible for memoizing it.
"""
import logging
from collections.abc import Callable

import pyarrow as pa
from dbarrow.buffers import resolve_buffer_length
from dbarrow.exceptions import FailedToDescribeColumn, UnsupportedArrowType
from dbarrow.options import BufferAllocationOptions
from dbarrow.sql_types import SqlDataType
from dbarrow.strategy.base import ColumnStrategy as ColumnStrategy
from dbarrow.strategy.binary import Binary as Binary
from dbarrow.strategy.binary import FixedSizedBinary as FixedSizedBinary
from dbarrow.strategy.boolean import NonNullableBoolean as NonNullableBoolean
from dbarrow.strategy.boolean import NullableBoolean as NullableBoolean
from dbarrow.strategy.date_time import DateConversion
from dbarrow.strategy.date_time import TimestampMsConversion
from dbarrow.strategy.date_time import TimestampNsConversion
from dbarrow.strategy.date_time import TimestampSecConversion
from dbarrow.strategy.date_time import TimestampUsConversion
from dbarrow.strategy.date_time import with_conversion as with_conversion
from dbarrow.strategy.decimal import Decimal as Decimal
from dbarrow.strategy.numeric import no_conversion as no_conversion
from dbarrow.strategy.text import choose_text_strategy as choose_text_strategy

logger = logging.getLogger(__name__)

# Types whose transit representation is bit identical to Arrow's
NO_CONVERSION_TYPES = frozenset({
    pa.int8(),
    pa.int16(),
    pa.int32(),
    pa.int64(),
    pa.uint8(),
    pa.float32(),
    pa.float64(),
})

TIMESTAMP_CONVERSIONS = {
    's': TimestampSecConversion,
    'ms': TimestampMsConversion,
    'us': TimestampUsConversion,
    'ns': TimestampNsConversion,
    }


def _describe(lazy_sql_type: Callable[[], SqlDataType]) -> SqlDataType:
    try:
        return lazy_sql_type()
    except Exception as e:
        raise FailedToDescribeColumn(e) from e


def choose_column_strategy(
    field: pa.Field,
    lazy_sql_type: Callable[[], SqlDataType],
    lazy_display_size: Callable[[], int],
    buffer_allocation_options: BufferAllocationOptions | None = None,
) -> ColumnStrategy:
    """Choose the strategy converting a source column into the Arrow type of `field`.

    Args:
        field: target field, its type and nullability decide the strategy
        lazy_sql_type: returns the native type of the source column
        lazy_display_size: returns the display size reported for the source column
        buffer_allocation_options: limits for variadic buffers

    Returns
        ColumnStrategy for the column

    Raises
        UnsupportedArrowType: no strategy exists for the type of `field`
        FailedToDescribeColumn: `lazy_sql_type` failed
        UnknownStringLength: `lazy_display_size` failed
        ZeroSizedColumn: no usable size was reported and no limit configured
    """
    options = buffer_allocation_options or BufferAllocationOptions()
    arrow_type = field.type
    nullable = field.nullable

    if pa.types.is_boolean(arrow_type):
        strategy = NullableBoolean() if nullable else NonNullableBoolean()
    elif arrow_type in NO_CONVERSION_TYPES:
        strategy = no_conversion(arrow_type, nullable)
    elif pa.types.is_date32(arrow_type):
        strategy = with_conversion(nullable, DateConversion)
    elif pa.types.is_timestamp(arrow_type):
        strategy = with_conversion(nullable, TIMESTAMP_CONVERSIONS[arrow_type.unit], arrow_type)
    elif pa.types.is_string(arrow_type):
        sql_type = _describe(lazy_sql_type)
        strategy = choose_text_strategy(sql_type, lazy_display_size, nullable, options.max_text_size)
    elif pa.types.is_decimal128(arrow_type) and arrow_type.scale >= 0:
        strategy = Decimal(nullable, arrow_type.precision, arrow_type.scale)
    elif pa.types.is_binary(arrow_type):
        sql_type = _describe(lazy_sql_type)
        length = resolve_buffer_length(sql_type.column_size(), options.max_binary_size, sql_type)
        strategy = Binary(nullable, length)
    elif pa.types.is_fixed_size_binary(arrow_type):
        strategy = FixedSizedBinary(nullable, arrow_type.byte_width)
    else:
        raise UnsupportedArrowType(arrow_type)

    logger.debug(f'Chose {strategy!r} for field {field.name!r} of type {arrow_type}')
    return strategy
