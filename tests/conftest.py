"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from todo_md.config import Config, ConfigModel  # noqa: E402
from todo_md.parser import LineParser  # noqa: E402


@pytest.fixture
def config(tmp_path):
    """Default configuration that never touches the home directory."""
    return ConfigModel(data_dir=str(tmp_path / "data"))


@pytest.fixture
def parser(config):
    return LineParser(config)


@pytest.fixture(autouse=True)
def reset_config_cache():
    Config.reset()
    yield
    Config.reset()
