"""Root conftest for all tests."""

import pytest

from trainlog.core.logger import setup_logger


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Keep test output quiet unless something goes wrong."""
    setup_logger(level="WARNING")
    yield
