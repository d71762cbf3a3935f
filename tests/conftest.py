"""
Shared pytest configuration.
"""
import pytest

from bloom_engine.config import configure_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep per-insert debug events out of test output."""
    configure_logging("WARNING")
    yield
