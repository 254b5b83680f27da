import pytest

from json_validators import reset_config


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the bundled settings."""
    reset_config()
    yield
    reset_config()
