"""
Conversion of database result sets into Arrow arrays.

For every column of a result set a strategy is chosen from the Arrow type of
the target field and the native type of the source column. The strategy
describes the transit buffer to bind to the data source and turns the filled
buffer into an Arrow array:

- dbarrow.choose_column_strategy(field, lazy_sql_type, lazy_display_size, options)
- dbarrow.BatchReader(cursor, schema) to read a DB-API cursor batch by batch
"""
__version__ = '0.1.0'

from dbarrow.adapters.column_info import Column, columns_from_cursor_description
from dbarrow.adapters.type_mapping import arrow_schema_from
from dbarrow.buffers import BufferDescription, BufferKind, ColumnBuffer
from dbarrow.buffers import ColumnView, resolve_buffer_length
from dbarrow.exceptions import BufferMismatchError, ColumnError, ColumnFailure
from dbarrow.exceptions import DbArrowError, FailedToDescribeColumn, TooLarge
from dbarrow.exceptions import TypeConversionError, UnknownStringLength
from dbarrow.exceptions import UnsupportedArrowType, ZeroSizedColumn
from dbarrow.options import BufferAllocationOptions
from dbarrow.reader import BatchReader, ColumnConverter, read_arrow_batches
from dbarrow.sql_types import SqlDataType, SqlType
from dbarrow.strategy import ColumnStrategy, choose_column_strategy
