"""
Tests for the column failure taxonomy.
"""
import pyarrow as pa
import pytest
from dbarrow.exceptions import ColumnError, ColumnFailure, DbArrowError
from dbarrow.exceptions import FailedToDescribeColumn, TooLarge
from dbarrow.exceptions import UnknownStringLength, UnsupportedArrowType
from dbarrow.exceptions import ZeroSizedColumn
from dbarrow.sql_types import SqlDataType, SqlType


@pytest.mark.parametrize('failure', [
    ZeroSizedColumn(SqlDataType(SqlType.LONGVARCHAR)),
    UnknownStringLength(SqlDataType(), RuntimeError('boom')),
    UnsupportedArrowType(pa.large_string()),
    FailedToDescribeColumn(RuntimeError('boom')),
    TooLarge(10, 2**40),
])
def test_failures_are_column_failures(failure):
    """Test every failure can be attached to a column"""
    assert isinstance(failure, ColumnFailure)
    assert isinstance(failure, DbArrowError)

    error = failure.into_column_error('price', 3)

    assert isinstance(error, ColumnError)
    assert error.name == 'price'
    assert error.index == 3
    assert error.failure is failure
    assert error.__cause__ is failure
    assert str(error).startswith("Failure for column 'price' at index 3: ")
    assert str(failure) in str(error)


def test_zero_sized_message_names_type():
    """Test the message explains the zero size and names the type"""
    message = str(ZeroSizedColumn(SqlDataType(SqlType.VARBINARY)))
    assert "'0'" in message
    assert 'VARBINARY' in message


def test_too_large_message():
    """Test the message names element count and size"""
    message = str(TooLarge(1000, 4001))
    assert '1000 elements' in message
    assert '4001 bytes' in message


def test_unsupported_message():
    """Test the message names the Arrow type"""
    assert 'list<item: int32>' in str(UnsupportedArrowType(pa.list_(pa.int32())))


if __name__ == '__main__':
    __import__('pytest').main([__file__])
