import pyarrow as pa
from dbarrow.buffers import BufferDescription, BufferKind, ColumnView
from dbarrow.exceptions import TypeConversionError
from dbarrow.strategy.base import ColumnStrategy


class Binary(ColumnStrategy):
    """Variadic binary data of at most `length` bytes."""

    def __init__(self, nullable: bool, length: int) -> None:
        self.nullable = nullable
        self.length = length

    def buffer_description(self) -> BufferDescription:
        return BufferDescription(nullable=self.nullable, kind=BufferKind.binary(self.length))

    def _fill(self, column_view: ColumnView) -> pa.Array:
        return pa.array(list(column_view.iter_bytes()), type=pa.binary())


class FixedSizedBinary(ColumnStrategy):
    """Binary data of exactly `length` bytes."""

    def __init__(self, nullable: bool, length: int) -> None:
        self.nullable = nullable
        self.length = length

    def buffer_description(self) -> BufferDescription:
        return BufferDescription(nullable=self.nullable, kind=BufferKind.binary(self.length))

    def _fill(self, column_view: ColumnView) -> pa.Array:
        values = list(column_view.iter_bytes())
        for row, data in enumerate(values):
            if data is not None and len(data) != self.length:
                raise TypeConversionError(
                    f'Value in row {row} has {len(data)} bytes, expected exactly {self.length}')
        return pa.array(values, type=pa.binary(self.length))
