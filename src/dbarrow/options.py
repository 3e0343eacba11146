from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd
import pyarrow as pa

from libb import ConfigOptions

__all__ = [
    'BufferAllocationOptions',
    'arrow_table_loader',
    'pandas_numpy_data_loader',
    'pandas_pyarrow_data_loader',
]

DEFAULT_MAX_BUFFER_BYTES = 2**31 - 1


def arrow_table_loader(batches: Iterable[pa.RecordBatch], schema: pa.Schema, **kwargs) -> pa.Table:
    """Collect record batches into a single Arrow table.

    Always returns a table, with the schema preserved for empty results.
    """
    return pa.Table.from_batches(list(batches), schema=schema)


def pandas_numpy_data_loader(batches: Iterable[pa.RecordBatch], schema: pa.Schema, **kwargs) -> pd.DataFrame:
    """Standard pandas DataFrame loader using NumPy dtypes.
    """
    return arrow_table_loader(batches, schema).to_pandas()


def pandas_pyarrow_data_loader(batches: Iterable[pa.RecordBatch], schema: pa.Schema, **kwargs) -> pd.DataFrame:
    """PyArrow-backed pandas DataFrame loader.

    Keeps Arrow types (decimals, fixed size binary, timestamps with unit) intact
    by using `pd.ArrowDtype` for every column.
    """
    return arrow_table_loader(batches, schema).to_pandas(types_mapper=pd.ArrowDtype)


@dataclass
class BufferAllocationOptions(ConfigOptions):
    """Limits for transit buffers bound to the data source.

    The limits do not (directly) apply to the created Arrow arrays, but to the
    buffers holding data in transit. Use them for columns like `VARCHAR(MAX)`
    or `VARBINARY(MAX)`, for which a driver reports either `0` or a size way
    larger than any actual value.

    - max_text_size: upper limit in bytes for variadic text buffers. None means
      the size reported by the data source is used.
    - max_binary_size: upper limit in bytes for variadic binary buffers.
    - fallible_allocations: raise `TooLarge` instead of failing hard in case
      a buffer can not be allocated due to its size.
    - max_buffer_bytes: size in bytes above which an allocation is considered
      unsafe when fallible_allocations is set.
    """
    max_text_size: int | None = None
    max_binary_size: int | None = None
    fallible_allocations: bool = False
    max_buffer_bytes: int = DEFAULT_MAX_BUFFER_BYTES

    def __post_init__(self):
        for name in ('max_text_size', 'max_binary_size'):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f'{name} must be a positive number of bytes or None, got {value}')
        if self.max_buffer_bytes <= 0:
            raise ValueError(f'max_buffer_bytes must be positive, got {self.max_buffer_bytes}')
