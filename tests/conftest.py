import pytest

from authflight.logging_config import error_aggregator
from authflight.session.navigation import RecordingNavigator
from authflight.session.store import InMemorySessionStore


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    """Keep error-rate alerts from leaking between tests."""
    error_aggregator.reset()
    yield
    error_aggregator.reset()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()
