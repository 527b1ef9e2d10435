"""
pytest integration.

Provides the ``clock_mock`` fixture and the ``clockmock_at`` marker. Both reset
the clock during teardown whatever the test outcome.

    @pytest.mark.clockmock_at("2021-05-11T14:30:00Z")
    def test_expiry():
        ...

    def test_expiry(clock_mock):
        clock_mock.freeze("2021-05-11T14:30:00Z")
        ...
"""

import pytest

from clockmock.engine import get_default_engine


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "clockmock_at(instant): run the test with the wall clock frozen at instant",
    )


@pytest.fixture
def clock_mock():
    """Yield the default interception engine and reset it after the test."""
    engine = get_default_engine()
    try:
        yield engine
    finally:
        engine.reset()


@pytest.fixture(autouse=True)
def _clockmock_marker(request):
    marker = request.node.get_closest_marker("clockmock_at")
    if marker is None:
        yield
        return

    if len(marker.args) != 1:
        raise pytest.UsageError("clockmock_at expects exactly one instant argument")

    engine = get_default_engine()
    engine.freeze(marker.args[0])
    try:
        yield
    finally:
        engine.reset()
