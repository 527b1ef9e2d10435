"""
Scoped freezing: freeze, run some work, always reset.

Scopes do not stack. Leaving an inner scope resets the clock, so the rest of
an enclosing scope runs against the real clock.
"""

import contextlib
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import TypeVar

from clockmock.engine import InterceptionEngine, get_default_engine
from clockmock.instants import InstantLike


T = TypeVar("T")


def execute_at_frozen_instant(
    instant: InstantLike,
    work: Callable[[], T],
    engine: InterceptionEngine | None = None,
) -> T:
    """
    Run ``work`` with the clock frozen at ``instant``.

    The clock is reset on every exit path. Whatever ``work`` returns is
    returned unchanged and whatever it raises propagates unchanged.

    Args:
        instant: Instant to freeze at
        work: Callable taking no arguments
        engine: Engine to use (the default engine if omitted)

    Returns:
        The return value of ``work``

    Example:
        >>> execute_at_frozen_instant("2021-05-11T14:30:00Z", lambda: int(time.time()))
        1620743400
    """
    engine = engine if engine is not None else get_default_engine()
    try:
        engine.freeze(instant)
        return work()
    finally:
        engine.reset()


@contextlib.contextmanager
def frozen_at(instant: InstantLike, engine: InterceptionEngine | None = None) -> Iterator[datetime]:
    """
    Context manager (or decorator) freezing the clock for its body.

    e.g. with frozen_at("2025-11-01T00:00:00Z") as now:
             assert datetime.now(timezone.utc) == now
    """
    engine = engine if engine is not None else get_default_engine()
    try:
        engine.freeze(instant)
        yield engine.get_frozen_instant()
    finally:
        engine.reset()
