import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop loguru sinks bound to CliRunner's temporary stderr once a command finishes."""
    yield
    logger.remove()
