"""Pytest configuration and shared fixtures for crowdptr tests

This module provides common fixtures and test utilities used across
unit tests.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

from crowdptr.common.config import Config, ConfigLoader
from crowdptr.common.settings import settings


@pytest.fixture
def sample_config() -> Config:
    """Load the repository configuration for testing

    Returns:
        Config object from config.yml
    """
    config_path = Path(__file__).parent.parent / "config.yml"
    if not config_path.exists():
        pytest.skip("config.yml not found - required for this test")
    return ConfigLoader.config_load(config_path)


@pytest.fixture
def reset_settings() -> Generator[None, None, None]:
    """Reset settings singleton between tests

    This fixture ensures each test gets a fresh Settings instance.
    """
    settings._config = None
    yield
    settings._config = None


@pytest.fixture
def frame() -> Callable[..., str]:
    """Factory for valid JSON packet frames with overridable fields"""

    def _frame(kind: str = "click", **fields: Any) -> str:
        data: dict[str, Any] = {
            "type": kind,
            "id": "viewer-1",
            "x": 0.5,
            "y": 0.25,
            "time": 1700000000.5,
            "latency": 120,
            "alt": False,
            "ctrl": False,
            "shift": False,
        }
        if kind != "hover":
            data["button"] = "left"
        data.update(fields)
        return json.dumps(data)

    return _frame


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)
