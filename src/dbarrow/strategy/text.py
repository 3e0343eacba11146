import codecs
import logging
from collections.abc import Callable

import pyarrow as pa
from dbarrow.buffers import BufferDescription, BufferKind, ColumnView
from dbarrow.buffers import resolve_buffer_length
from dbarrow.exceptions import TypeConversionError, UnknownStringLength
from dbarrow.sql_types import SqlDataType
from dbarrow.strategy.base import ColumnStrategy

logger = logging.getLogger(__name__)


class NarrowText(ColumnStrategy):
    """UTF-8 encoded text."""

    def __init__(self, nullable: bool, max_str_len: int) -> None:
        self.nullable = nullable
        self.max_str_len = max_str_len

    def buffer_description(self) -> BufferDescription:
        return BufferDescription(nullable=self.nullable, kind=BufferKind.text(self.max_str_len))

    def _fill(self, column_view: ColumnView) -> pa.Array:
        values = []
        for row, data in enumerate(column_view.iter_bytes()):
            if data is None:
                values.append(None)
                continue
            try:
                if column_view.indicators[row] > self.max_str_len:
                    # truncation may have split the last character, drop its leading bytes
                    values.append(codecs.getincrementaldecoder('utf-8')().decode(data, final=False))
                else:
                    values.append(data.decode('utf-8'))
            except UnicodeDecodeError as e:
                raise TypeConversionError(f'Invalid UTF-8 text in row {row}: {e}') from e
        return pa.array(values, type=pa.string())


def choose_text_strategy(sql_type: SqlDataType,
                         lazy_display_size: Callable[[], int],
                         nullable: bool,
                         max_text_size: int | None) -> ColumnStrategy:
    """Size the text buffer from the SQL type, falling back to the display size.

    The display size is only fetched for columns which are not character
    columns, e.g. numbers fetched as text.
    """
    octet_len = sql_type.utf8_len()
    if octet_len is None:
        try:
            display_size = lazy_display_size()
        except Exception as e:
            raise UnknownStringLength(sql_type, e) from e
        # drivers report negative sizes (e.g. SQL_NO_TOTAL) if they do not know
        octet_len = max(display_size or 0, 0)
    octet_len = resolve_buffer_length(octet_len, max_text_size, sql_type)
    logger.debug(f'Text buffer for {sql_type!r} sized to {octet_len} bytes')
    return NarrowText(nullable, octet_len)
