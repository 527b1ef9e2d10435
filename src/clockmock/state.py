"""
Process-wide frozen clock state.

FrozenClockState is the single source of truth every intercepted surface
reads from. The default instance, CLOCK_STATE, lives for the whole process:
it is filled by the first freeze and emptied by reset, and must be emptied
between tests.
"""

from datetime import datetime

from clockmock.instants import copy_instant


class FrozenClockState:
    """Holds the frozen instant and whether the clock is currently frozen."""

    def __init__(self) -> None:
        self._instant: datetime | None = None
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def set(self, instant: datetime) -> None:
        """Store a copy of ``instant`` and mark the clock frozen."""
        self._instant = copy_instant(instant)
        self._active = True

    def get(self) -> datetime | None:
        """Return the frozen instant, or None when the clock is not frozen."""
        return self._instant

    def clear(self) -> None:
        """Forget the frozen instant. Safe to call when nothing is frozen."""
        self._instant = None
        self._active = False

    def __repr__(self) -> str:
        return f"FrozenClockState(active={self._active}, instant={self._instant!r})"


CLOCK_STATE = FrozenClockState()
