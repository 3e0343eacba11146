"""
Tests for resolving source type codes and inferring Arrow schemas.
"""
import datetime
import decimal
import json
import logging

import pyarrow as pa
import pytest
from dbarrow.adapters.column_info import Column
from dbarrow.adapters.type_mapping import arrow_schema_from, arrow_type_from_sql
from dbarrow.adapters.type_mapping import parse_arrow_type, resolve_sql_type
from dbarrow.config.type_mapping import TypeMappingConfig
from dbarrow.sql_types import SqlDataType, SqlType


class TestResolveSqlType:
    """Test normalizing driver type codes"""

    @pytest.mark.parametrize(('oid', 'expected'), [
        (16, SqlType.BIT),
        (20, SqlType.BIGINT),
        (25, SqlType.LONGVARCHAR),
        (1043, SqlType.VARCHAR),
        (1114, SqlType.TIMESTAMP),
        (1700, SqlType.NUMERIC),
        (17, SqlType.VARBINARY),
    ])
    def test_postgres_oids(self, oid, expected):
        """Test PostgreSQL OIDs map to ODBC types"""
        assert resolve_sql_type('postgresql', oid) == expected

    def test_postgres_unknown_oid(self):
        """Test unmapped OIDs are unknown"""
        assert resolve_sql_type('postgresql', 99999) == SqlType.UNKNOWN

    @pytest.mark.parametrize(('declared', 'expected'), [
        ('INTEGER', SqlType.BIGINT),
        ('varchar(20)', SqlType.VARCHAR),
        ('DECIMAL(10, 2)', SqlType.DECIMAL),
        ('blob', SqlType.LONGVARBINARY),
        ('GEOMETRY', SqlType.UNKNOWN),
    ])
    def test_sqlite_declared_types(self, declared, expected):
        """Test SQLite declared type names map ignoring arguments and case"""
        assert resolve_sql_type('sqlite', declared) == expected

    @pytest.mark.parametrize(('python_type', 'expected'), [
        (bool, SqlType.BIT),
        (int, SqlType.BIGINT),
        (float, SqlType.DOUBLE),
        (decimal.Decimal, SqlType.DECIMAL),
        (str, SqlType.WVARCHAR),
        (bytearray, SqlType.VARBINARY),
        (datetime.datetime, SqlType.TIMESTAMP),
        (datetime.date, SqlType.DATE),
    ])
    def test_python_types(self, python_type, expected):
        """Test Python types reported by ODBC drivers"""
        assert resolve_sql_type('odbc', python_type) == expected

    def test_odbc_codes(self):
        """Test numeric ODBC codes and SqlType members pass through"""
        assert resolve_sql_type(None, 93) == SqlType.TIMESTAMP
        assert resolve_sql_type(None, -9) == SqlType.WVARCHAR
        assert resolve_sql_type(None, SqlType.GUID) == SqlType.GUID
        assert resolve_sql_type(None, 12345) == SqlType.UNKNOWN
        assert resolve_sql_type(None, None) == SqlType.UNKNOWN


class TestArrowTypeFromSql:
    """Test the Arrow type a native type is fetched as"""

    @pytest.mark.parametrize(('sql_data_type', 'expected'), [
        (SqlDataType(SqlType.BIT), pa.bool_()),
        (SqlDataType(SqlType.TINYINT), pa.int8()),
        (SqlDataType(SqlType.SMALLINT), pa.int16()),
        (SqlDataType(SqlType.INTEGER), pa.int32()),
        (SqlDataType(SqlType.BIGINT), pa.int64()),
        (SqlDataType(SqlType.REAL), pa.float32()),
        (SqlDataType(SqlType.DOUBLE), pa.float64()),
        (SqlDataType(SqlType.FLOAT, 24), pa.float32()),
        (SqlDataType(SqlType.FLOAT, 53), pa.float64()),
        (SqlDataType(SqlType.DATE), pa.date32()),
        (SqlDataType(SqlType.VARCHAR, 10), pa.string()),
        (SqlDataType(SqlType.WLONGVARCHAR), pa.string()),
        (SqlDataType(SqlType.GUID), pa.string()),
        (SqlDataType(SqlType.TIME, 8), pa.string()),
        (SqlDataType(SqlType.UNKNOWN), pa.string()),
        (SqlDataType(SqlType.VARBINARY, 10), pa.binary()),
        (SqlDataType(SqlType.BINARY, 16), pa.binary(16)),
        (SqlDataType(SqlType.BINARY, 0), pa.binary()),
    ])
    def test_mapping(self, sql_data_type, expected):
        """Test each native type maps to a fetchable Arrow type"""
        assert arrow_type_from_sql(sql_data_type) == expected

    @pytest.mark.parametrize(('precision', 'expected'), [
        (2, pa.int8()),
        (4, pa.int16()),
        (9, pa.int32()),
        (18, pa.int64()),
        (19, pa.decimal128(19, 0)),
        (39, pa.string()),
    ])
    def test_integral_decimals(self, precision, expected):
        """Test decimals without scale become the smallest fitting integer"""
        assert arrow_type_from_sql(SqlDataType(SqlType.NUMERIC, precision, 0)) == expected

    def test_scaled_decimal(self):
        """Test decimals with scale keep precision and scale"""
        assert arrow_type_from_sql(SqlDataType(SqlType.DECIMAL, 38, 10)) == pa.decimal128(38, 10)

    def test_unbounded_decimal(self):
        """Test decimals without reported precision are fetched as text"""
        assert arrow_type_from_sql(SqlDataType(SqlType.NUMERIC, 0, 0)) == pa.string()

    @pytest.mark.parametrize(('digits', 'unit'), [(0, 's'), (3, 'ms'), (6, 'us'), (7, 'ns'), (9, 'ns')])
    def test_timestamp_precision(self, digits, unit):
        """Test the timestamp unit follows the fractional digits"""
        assert arrow_type_from_sql(SqlDataType(SqlType.TIMESTAMP, decimal_digits=digits)) == pa.timestamp(unit)


class TestParseArrowType:
    """Test parsing configured type names"""

    @pytest.mark.parametrize(('name', 'expected'), [
        ('int64', pa.int64()),
        ('String', pa.string()),
        ('decimal(18,2)', pa.decimal128(18, 2)),
        ('decimal128( 10 , 4 )', pa.decimal128(10, 4)),
        ('fixed_size_binary[16]', pa.binary(16)),
        ('binary(4)', pa.binary(4)),
        ('timestamp[us]', pa.timestamp('us')),
        ('date32', pa.date32()),
    ])
    def test_names(self, name, expected):
        """Test aliases and parameterized types"""
        assert parse_arrow_type(name) == expected

    def test_unknown_name(self):
        """Test unknown names are rejected"""
        with pytest.raises(ValueError):
            parse_arrow_type('not_a_type')


class TestArrowSchemaFrom:
    """Test schema inference from column metadata"""

    def columns(self):
        return [
            Column('id', SqlType.INTEGER, nullable=False),
            Column('order_amount', SqlType.DOUBLE),
            Column('created', SqlType.TIMESTAMP, internal_size=26, scale=6, nullable=True),
        ]

    def test_native_types(self):
        """Test fields follow native types and unknown nullability is nullable"""
        schema = arrow_schema_from(self.columns())

        assert schema == pa.schema([
            pa.field('id', pa.int32(), nullable=False),
            pa.field('order_amount', pa.float64(), nullable=True),
            pa.field('created', pa.timestamp('us'), nullable=True),
        ])

    def test_column_override(self):
        """Test a table qualified override replaces the native type"""
        TypeMappingConfig.get_instance().add_column_mapping('odbc', 'orders', 'created', 'timestamp[ms]')

        schema = arrow_schema_from(self.columns(), 'odbc', 'orders')
        assert schema.field('created').type == pa.timestamp('ms')

        other_table = arrow_schema_from(self.columns(), 'odbc', 'invoices')
        assert other_table.field('created').type == pa.timestamp('us')

    def test_pattern_override(self):
        """Test pattern overrides match column names"""
        TypeMappingConfig.get_instance().add_pattern_mapping('odbc', '_amount$', 'decimal128(18, 2)')

        schema = arrow_schema_from(self.columns(), 'odbc')
        assert schema.field('order_amount').type == pa.decimal128(18, 2)
        assert schema.field('id').type == pa.int32()

    def test_override_requires_dialect(self):
        """Test overrides of a dialect do not apply without one"""
        TypeMappingConfig.get_instance().add_column_mapping('odbc', None, 'id', 'int64')
        assert arrow_schema_from(self.columns()).field('id').type == pa.int32()


class TestTypeMappingConfig:
    """Test loading configured type overrides"""

    def test_load_config(self, tmp_path):
        """Test mappings are read from a JSON file"""
        config_file = tmp_path / 'type_mapping.json'
        config_file.write_text(json.dumps({
            'postgresql': {
                'patterns': {'_id$': 'int64'},
                'columns': {'Orders.Total': 'decimal128(12, 2)'},
            },
        }))

        config = TypeMappingConfig(config_file)

        assert config.get_type_for_column('postgresql', 'orders', 'total') == 'decimal128(12, 2)'
        assert config.get_type_for_column('postgresql', None, 'customer_id') == 'int64'
        assert config.get_type_for_column('postgresql', None, 'name') is None
        assert config.get_type_for_column('sqlite', 'orders', 'total') is None

    def test_invalid_config(self, tmp_path, caplog):
        """Test an unreadable file is logged and ignored"""
        config_file = tmp_path / 'type_mapping.json'
        config_file.write_text('{not json')

        with caplog.at_level(logging.WARNING):
            config = TypeMappingConfig(config_file)

        assert 'Failed to load type mapping config' in caplog.text
        assert config.get_type_for_column('postgresql', None, 'id') is None

    def test_singleton(self):
        """Test the shared instance is reset between tests"""
        instance = TypeMappingConfig.get_instance()
        assert TypeMappingConfig.get_instance() is instance
        TypeMappingConfig.reset_instance()
        assert TypeMappingConfig.get_instance() is not instance


if __name__ == '__main__':
    __import__('pytest').main([__file__])
