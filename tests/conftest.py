"""
Pytest configuration: fresh logger and config state for every test.
"""
import os
import sys
import pytest

# Add src to path so the package imports without being installed
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from untar import logger
from untar.manager_config import ConfigManager


@pytest.fixture(autouse=True)
def reset_state():
    """Give every test a fresh logger and config singleton."""
    ConfigManager.reset_instance()
    logger.initialize(logger.INFO)
    yield
    ConfigManager.reset_instance()
    logger.initialize(logger.INFO)


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Run the test with tmp_path as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def archive_file(tmp_path):
    """Write archive bytes to a file and return its path as a string."""
    def _write(data, name="test.tar"):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _write
