"""
Shared pytest fixtures.
"""

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_loguru():
    """Remove loguru sinks added during a test (the CLI binds them to captured streams)."""
    yield
    logger.remove()
