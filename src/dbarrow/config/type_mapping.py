"""
Configuration for per-column Arrow type overrides.

Overrides are read from a JSON file of the form::

    {
        "postgresql": {
            "patterns": {"_amount$": "decimal128(18, 2)"},
            "columns": {"orders.created": "timestamp[ms]"}
        }
    }
"""
import json
import logging
import pathlib
import re

logger = logging.getLogger(__name__)


class TypeMappingConfig:
    """Configuration for custom Arrow type mappings"""

    _instance = None

    @classmethod
    def get_instance(cls):
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls):
        """Drop the singleton so the next access reloads the configuration"""
        cls._instance = None

    def __init__(self, config_file=None):
        self._pattern_mappings = {}

        if config_file:
            self.load_config(config_file)
        else:
            default_locations = [
                pathlib.Path('~/.config/dbarrow/type_mapping.json').expanduser(),
                '/etc/dbarrow/type_mapping.json',
                'type_mapping.json'
            ]

            for location in default_locations:
                if pathlib.Path(location).exists():
                    self.load_config(location)
                    break

    def _mappings(self, dialect):
        return self._pattern_mappings.setdefault(dialect, {'patterns': {}, 'columns': {}})

    def load_config(self, config_file):
        """Load configuration from file, merging it into the current mappings"""
        try:
            with pathlib.Path(config_file).open() as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f'Failed to load type mapping config {config_file}: {e}')
            return

        for dialect, mappings in config.items():
            current = self._mappings(dialect)
            current['patterns'].update(mappings.get('patterns', {}))
            current['columns'].update({k.lower(): v for k, v in mappings.get('columns', {}).items()})

        logger.info(f'Loaded type mapping configuration from {config_file}')

    def get_type_for_column(self, dialect, table_name, column_name):
        """Get the configured Arrow type name for a column, or None"""
        if dialect not in self._pattern_mappings:
            return None

        columns = self._pattern_mappings[dialect]['columns']

        if table_name:
            key = f'{table_name.lower()}.{column_name.lower()}'
            if key in columns:
                return columns[key]

        if column_name.lower() in columns:
            return columns[column_name.lower()]

        for pattern, arrow_type in self._pattern_mappings[dialect]['patterns'].items():
            if re.search(pattern, column_name.lower()):
                return arrow_type

        return None

    def add_column_mapping(self, dialect, table_name, column_name, arrow_type):
        """Add a specific column mapping"""
        key = f'{table_name.lower()}.{column_name.lower()}' if table_name else column_name.lower()
        self._mappings(dialect)['columns'][key] = arrow_type

    def add_pattern_mapping(self, dialect, pattern, arrow_type):
        """Add a column name pattern mapping"""
        self._mappings(dialect)['patterns'][pattern] = arrow_type
