import pytest

from escolas.core.logging.builder import setup_logging, stop_queue_logging


@pytest.fixture(autouse=True)
def restore_logging(test_settings):
    """These tests reconfigure logging; put the suite's configuration back afterwards."""
    yield
    stop_queue_logging()
    setup_logging(test_settings)
