"""
Shared fixtures.
"""

import pytest

from mockkit.config.loader import CONFIG_ENV_VAR
from mockkit.mock.factory import set_default_settings


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Run every test with built-in defaults regardless of the environment."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    set_default_settings(None)
    yield
    set_default_settings(None)
