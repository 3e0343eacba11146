import numpy as np
import pyarrow as pa
from dbarrow.buffers import BufferDescription, BufferKind, ColumnView
from dbarrow.exceptions import TypeConversionError
from dbarrow.strategy.base import ColumnStrategy


def _as_bool(values: np.ndarray) -> np.ndarray:
    """Interpret bits, which must be either 0 or 1.
    """
    invalid = np.flatnonzero(values > 1)
    if len(invalid):
        row = int(invalid[0])
        raise TypeConversionError(f'Invalid bit value {values[row]} in row {row}')
    return values.astype(np.bool_)


class NonNullableBoolean(ColumnStrategy):

    def buffer_description(self) -> BufferDescription:
        return BufferDescription(nullable=False, kind=BufferKind.bit())

    def _fill(self, column_view: ColumnView) -> pa.Array:
        return pa.array(_as_bool(column_view.values), type=pa.bool_())


class NullableBoolean(ColumnStrategy):

    def buffer_description(self) -> BufferDescription:
        return BufferDescription(nullable=True, kind=BufferKind.bit())

    def _fill(self, column_view: ColumnView) -> pa.Array:
        mask = column_view.null_mask()
        # bits of missing values are undefined
        values = np.where(mask, 0, column_view.values).astype(np.uint8)
        return pa.array(_as_bool(values), type=pa.bool_(), mask=mask)
