"""
Decimal strategy.

Decimals are fetched as text and parsed into fixed-point values without
passing through floating point. The position of the decimal point is implied
by the scale of the target field, so the point itself is dropped before the
remaining digits are read as a signed integer.
"""
import decimal

import pyarrow as pa
from dbarrow.buffers import BufferDescription, BufferKind, ColumnView
from dbarrow.exceptions import TypeConversionError
from dbarrow.strategy.base import ColumnStrategy

__all__ = ['Decimal', 'parse_fixed_point']


def parse_fixed_point(text: bytes) -> int:
    """Parse decimal text into an integer, ignoring every decimal point.

    >>> parse_fixed_point(b'123.45')
    12345
    >>> parse_fixed_point(b'-0.5')
    -5
    >>> parse_fixed_point(b'+42')
    42
    >>> parse_fixed_point(b'12a')
    Traceback (most recent call last):
    ...
    ValueError: Malformed decimal text b'12a'
    """
    digits = text.replace(b'.', b'')
    sign = 1
    if digits[:1] in {b'-', b'+'}:
        if digits[:1] == b'-':
            sign = -1
        digits = digits[1:]
    if not digits or not digits.isdigit():
        raise ValueError(f'Malformed decimal text {text!r}')
    return sign * int(digits)


class Decimal(ColumnStrategy):

    def __init__(self, nullable: bool, precision: int, scale: int) -> None:
        self.nullable = nullable
        self.precision = precision
        self.scale = scale

    def buffer_description(self) -> BufferDescription:
        # precision digits, a sign and a decimal point
        return BufferDescription(nullable=self.nullable,
                                 kind=BufferKind.text(self.precision + 2))

    def _fill(self, column_view: ColumnView) -> pa.Array:
        limit = 10 ** self.precision
        values = []
        for row, text in enumerate(column_view.iter_bytes()):
            if text is None:
                values.append(None)
                continue
            try:
                num = parse_fixed_point(text)
            except ValueError as e:
                raise TypeConversionError(f'Row {row}: {e}') from e
            if abs(num) >= limit:
                raise TypeConversionError(
                    f'Row {row}: {text!r} does not fit into a decimal with precision {self.precision}')
            values.append(decimal.Decimal(f'{num}e-{self.scale}'))
        return pa.array(values, type=pa.decimal128(self.precision, self.scale))
