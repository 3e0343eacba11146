"""
Strategies for columns whose transit representation is identical to Arrow's.
"""
import numpy as np
import pyarrow as pa
from dbarrow.buffers import BufferDescription, BufferKind, ColumnView
from dbarrow.strategy.base import ColumnStrategy

__all__ = [
    'NonNullDirect',
    'NullableDirect',
    'no_conversion',
]


class _Direct(ColumnStrategy):

    def __init__(self, arrow_type: pa.DataType) -> None:
        self.arrow_type = arrow_type
        self.dtype = np.dtype(arrow_type.to_pandas_dtype())

    def buffer_description(self) -> BufferDescription:
        return BufferDescription(nullable=self.nullable, kind=BufferKind.fixed(self.dtype))


class NonNullDirect(_Direct):
    """Bulk copy of a non-nullable fixed width column."""

    nullable = False

    def _fill(self, column_view: ColumnView) -> pa.Array:
        # the transit buffer is reused by the next batch, so the array must own a copy
        return pa.array(column_view.values.copy(), type=self.arrow_type)


class NullableDirect(_Direct):
    """Bulk copy with the null indicators mapped onto the validity bitmap."""

    nullable = True

    def _fill(self, column_view: ColumnView) -> pa.Array:
        return pa.array(column_view.values.copy(), type=self.arrow_type,
                        mask=column_view.null_mask())


def no_conversion(arrow_type: pa.DataType, nullable: bool) -> ColumnStrategy:
    """Strategy for fixed width numbers which need no conversion.
    """
    if nullable:
        return NullableDirect(arrow_type)
    return NonNullDirect(arrow_type)
