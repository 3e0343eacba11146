"""
Exception classes for column conversion.

Strategy selection failures derive from ColumnFailure. They describe a single
column without knowing its name or position; callers attach both with
`ColumnFailure.into_column_error` before surfacing the error further.
"""
from typing import Any


class DbArrowError(Exception):
    """Base class for all dbarrow errors.
    """


class TypeConversionError(DbArrowError):
    """Error converting a row value between the transit buffer and Arrow.
    """


class BufferMismatchError(DbArrowError):
    """A column view does not match the buffer description of a strategy.
    """


class ColumnFailure(DbArrowError):
    """Error choosing a conversion strategy for a column.
    """

    def into_column_error(self, name: str, index: int) -> 'ColumnError':
        """Attach column name and positional index to the failure.
        """
        error = ColumnError(name, index, self)
        error.__cause__ = self
        return error


class ZeroSizedColumn(ColumnFailure):
    """The source reported a size of zero and no upper limit was configured.
    """

    def __init__(self, sql_type: Any) -> None:
        self.sql_type = sql_type
        super().__init__(
            "The data source reported a size of '0' for the column. This might "
            'indicate that the driver cannot specify a sensible upper bound for '
            'the column, e.g. VARCHAR(max). Try casting the column into a type '
            'with a sensible upper bound, or set a buffer size limit. The type of '
            f'the column causing this error is {sql_type!r}.')


class UnknownStringLength(ColumnFailure):
    """Unable to fetch the display size of a text column.
    """

    def __init__(self, sql_type: Any, source: BaseException) -> None:
        self.sql_type = sql_type
        self.source = source
        super().__init__(
            'Unable to deduce the maximum string length for the SQL data type '
            f'reported by the driver. Reported SQL data type is: {sql_type!r}.\n'
            f'Error fetching column display size: {source}')


class UnsupportedArrowType(ColumnFailure):
    """The Arrow type of the target field can not be fetched from a data source.
    """

    def __init__(self, arrow_type: Any) -> None:
        self.arrow_type = arrow_type
        super().__init__(
            f'Unsupported arrow type: `{arrow_type}`. This type can currently not '
            'be fetched from a data source.')


class FailedToDescribeColumn(ColumnFailure):
    """Fetching the native type of the column from the result set failed.
    """

    def __init__(self, source: BaseException) -> None:
        self.source = source
        super().__init__(
            'An error occurred fetching the column description or data type from '
            f'the metainformation attached to the result set:\n{source}')


class TooLarge(ColumnFailure):
    """A transit buffer is too large to be allocated.
    """

    def __init__(self, num_elements: int, element_size: int) -> None:
        self.num_elements = num_elements
        self.element_size = element_size
        super().__init__(
            'Column buffer is too large to be allocated. Tried to allocate '
            f'{num_elements} elements with {element_size} bytes in size each.')


class ColumnError(DbArrowError):
    """Column failure enriched with the column name and index.
    """

    def __init__(self, name: str, index: int, failure: ColumnFailure) -> None:
        self.name = name
        self.index = index
        self.failure = failure
        super().__init__(
            f"Failure for column '{name}' at index {index}: {failure}")
