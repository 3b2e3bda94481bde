"""Pytest configuration for coinfetch tests."""

import pytest

from tests.helpers import FakeClock, RecordingSleep


@pytest.fixture
def clock() -> FakeClock:
    """Clock injected into cache stores and rate limiters."""
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    """Sleep replacement so retry tests never wait."""
    return RecordingSleep()
