"""Test configuration."""

from pathlib import Path

import pytest
from pytest import Config

from venue_locator.core.logging import configure_logging

fixture = pytest.fixture

pytest_plugins: list[str] = [
    "tests.fixtures.location",
]


@fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    # Configure logging for test environment
    configure_logging(testing=True)
