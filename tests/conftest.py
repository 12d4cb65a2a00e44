import pytest
import structlog

from tests.fakes import FakeSender


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def fake_sender() -> FakeSender:
    return FakeSender()
