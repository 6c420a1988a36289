"""Shared pytest fixtures."""

import pytest

from app.logging.context import clear_log_context

ENV_VARS = ("LOG_LEVEL", "DATABASE_URL", "CONTACT_FINDER_INPUT", "ENVIRONMENT")


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Start every config test from a clean environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_log_context():
    clear_log_context()
    yield
    clear_log_context()
