"""
Pytest configuration and shared fixtures for logflow tests.
"""

import os
from pathlib import Path
from unittest.mock import Mock

import pytest

from logflow.levels import LevelDef
from logflow.manager import LogManager
from logflow.transports import BufferTransport


@pytest.fixture
def manager():
    """A LogManager with the standard levels that has not been started."""
    return LogManager(levels="std")


@pytest.fixture
def buffer(manager):
    """A BufferTransport registered with the manager fixture."""
    return manager.add_transport(BufferTransport(manager))


@pytest.fixture
def log(manager, buffer):
    """Root logger of a manager that was started outside any event loop."""
    return manager.get_logger()


@pytest.fixture
def four_levels():
    """ERROR=0, WARN=1, INFO=2, DEBUG=3: smaller ranks are more severe."""
    return [
        LevelDef("ERROR", 0, "red"),
        LevelDef("WARN", 1, "yellow"),
        LevelDef("INFO", 2, "green"),
        LevelDef("DEBUG", 3, "blue"),
    ]


@pytest.fixture
def mock_http_client():
    """HTTP client whose post() answers 204 No Content."""
    client = Mock()
    client.post.return_value = Mock(status_code=204, text="")
    return client


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for files written by tests."""
    return Path(tmp_path)


@pytest.fixture
def config_file(temp_dir):
    """Path of a configuration file inside the temporary directory."""
    config_dir = temp_dir / ".config" / "logflow"
    config_dir.mkdir(parents=True)
    return config_dir / "config.toml"


@pytest.fixture
def clean_environment(monkeypatch):
    """Remove environment variables that change logflow's behaviour."""
    for var in list(os.environ):
        if var.startswith("LOGFLOW_"):
            monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    yield


# Pytest hooks
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
