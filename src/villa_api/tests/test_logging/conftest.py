import pytest

from villa_api.config import get_settings
from villa_api.core.logging.builder import setup_logging, stop_queue_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """Tests here reconfigure logging; put the suite-wide configuration back afterwards."""
    yield
    stop_queue_logging()
    setup_logging(get_settings())
