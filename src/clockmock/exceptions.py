"""
Custom exceptions for clockmock.

Every error raised by the package derives from ClockMockError so callers
can catch all of them with a single except clause.
"""


class ClockMockError(Exception):
    """Base class for all clockmock errors."""

    pass


class UnsupportedSurfaceError(ClockMockError):
    """
    Raised when a time-retrieval surface cannot be intercepted.

    The engine resolves every surface when it is constructed, so this error
    surfaces before any test runs against a partially mocked clock.

    Attributes:
        surface: Name of the surface that could not be resolved (e.g. "time.time_ns")
    """

    def __init__(self, surface: str, reason: str):
        self.surface = surface
        super().__init__(f"Cannot intercept surface {surface}: {reason}")


class InvalidInstantError(ClockMockError, ValueError):
    """Raised when a value cannot be turned into a frozen instant."""

    pass


class ConfigurationError(ClockMockError):
    """Error in clockmock configuration."""

    pass
