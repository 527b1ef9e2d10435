"""clockmock - freeze wall-clock time for tests."""

__version__ = "0.1.0"

from .engine import (
    InterceptionEngine,
    freeze,
    get_default_engine,
    get_frozen_instant,
    reset,
    set_default_engine,
)
from .exceptions import (
    ClockMockError,
    ConfigurationError,
    InvalidInstantError,
    UnsupportedSurfaceError,
)
from .scoped import execute_at_frozen_instant, frozen_at
from .state import CLOCK_STATE, FrozenClockState

__all__ = [
    "CLOCK_STATE",
    "ClockMockError",
    "ConfigurationError",
    "FrozenClockState",
    "InterceptionEngine",
    "InvalidInstantError",
    "UnsupportedSurfaceError",
    "execute_at_frozen_instant",
    "freeze",
    "frozen_at",
    "get_default_engine",
    "get_frozen_instant",
    "reset",
    "set_default_engine",
]
