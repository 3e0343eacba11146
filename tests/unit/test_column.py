"""
Tests for Column metadata extracted from cursor descriptions.
"""
import decimal
from types import SimpleNamespace

import pytest
from dbarrow.adapters.column_info import Column, columns_from_cursor_description
from dbarrow.sql_types import SqlDataType, SqlType


def test_from_odbc_description_tuple():
    """Test a pyodbc style 7-tuple with a Python type code"""
    column = Column.from_cursor_description(('price', decimal.Decimal, 12, 10, 10, 2, True), 'odbc')

    assert column.name == 'price'
    assert column.nullable is True
    assert column.sql_data_type == SqlDataType(SqlType.DECIMAL, 10, 2)


def test_from_sqlite_description_tuple():
    """Test SQLite descriptions carry nothing but the name"""
    column = Column.from_cursor_description(('name', None, None, None, None, None, None), 'sqlite')

    assert column.sql_data_type == SqlDataType(SqlType.UNKNOWN, 0)
    assert column.nullable is None
    assert column.lazy_display_size() == 0


def test_from_short_description_tuple():
    """Test missing trailing fields of a description are treated as unknown"""
    column = Column.from_cursor_description(('flag', bool), None)

    assert column.sql_data_type.sql_type == SqlType.BIT
    assert column.nullable is None


def test_from_postgres_column():
    """Test psycopg column objects are read by attribute"""
    item = SimpleNamespace(name='title', type_code=1043, display_size=None,
                           internal_size=80, precision=None, scale=None)
    column = Column.from_cursor_description(item, 'postgresql')

    assert column.sql_data_type == SqlDataType(SqlType.VARCHAR, 80)
    assert column.lazy_sql_type() == SqlDataType(SqlType.VARCHAR, 80)


def test_postgres_numeric_and_timestamp():
    """Test precision and scale flow into numeric and timestamp types"""
    numeric = Column.from_cursor_description(
        SimpleNamespace(name='n', type_code=1700, display_size=None, internal_size=None,
                        precision=12, scale=4), 'postgresql')
    timestamp = Column.from_cursor_description(
        SimpleNamespace(name='t', type_code=1114, display_size=None, internal_size=8,
                        precision=None, scale=3), 'postgresql')

    assert numeric.sql_data_type == SqlDataType(SqlType.NUMERIC, 12, 4)
    assert timestamp.sql_data_type.decimal_digits == 3


def test_lazy_display_size():
    """Test the reported display size wins over the one implied by the type"""
    assert Column('n', SqlType.INTEGER).lazy_display_size() == 11
    assert Column('n', SqlType.INTEGER, display_size=5).lazy_display_size() == 5
    assert Column('n', SqlType.INTEGER, display_size=-4).lazy_display_size() == 11


def test_explicit_sql_data_type():
    """Test an explicit native type is kept"""
    sql_data_type = SqlDataType(SqlType.WVARCHAR, 20)
    column = Column('s', None, sql_data_type=sql_data_type)
    assert column.lazy_sql_type() is sql_data_type


def test_get_names():
    """Test names are listed in column order"""
    columns = [Column('a', int), Column('b', str, nullable=False)]
    assert Column.get_names(columns) == ['a', 'b']


@pytest.mark.parametrize('description', [None, []])
def test_columns_from_empty_description(description):
    """Test cursors without result set have no columns"""
    cursor = SimpleNamespace(description=description)
    assert columns_from_cursor_description(cursor, None) == []


def test_columns_from_cursor_description():
    """Test every description item becomes a Column"""
    cursor = SimpleNamespace(description=[('a', int, None, None, None, None, None),
                                          ('b', str, None, None, None, None, None)])
    columns = columns_from_cursor_description(cursor, 'odbc')

    assert [column.sql_data_type.sql_type for column in columns] == [SqlType.BIGINT, SqlType.WVARCHAR]


if __name__ == '__main__':
    __import__('pytest').main([__file__])
