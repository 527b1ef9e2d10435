"""Pytest configuration for clockmock tests."""

import pytest

import clockmock
from clockmock.engine import InterceptionEngine
from clockmock.state import FrozenClockState


@pytest.fixture(autouse=True)
def reset_default_clock():
    """Make sure no test leaks a frozen clock into the next one."""
    yield
    clockmock.reset()


@pytest.fixture
def clock_state():
    return FrozenClockState()


@pytest.fixture
def engine(clock_state):
    """An engine with its own clock state, reset after the test."""
    isolated = InterceptionEngine(state=clock_state)
    yield isolated
    isolated.reset()
