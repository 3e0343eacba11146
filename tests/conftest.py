import pathlib
import site

import pytest
from dbarrow.config.type_mapping import TypeMappingConfig

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def reset_type_mapping_config():
    """Drop configured type overrides before and after each test to ensure test isolation."""
    TypeMappingConfig.reset_instance()
    yield
    TypeMappingConfig.reset_instance()


pytest_plugins = [
    'tests.fixtures.metadata',
    'tests.fixtures.values',
    'tests.fixtures.sqlite',
]
