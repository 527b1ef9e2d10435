"""
Interception engine.

The engine redirects every supported time surface to the frozen clock state
and puts the genuine objects back on reset. From a caller's point of view
both operations are all-or-nothing: either every surface is intercepted or
none is.
"""

import importlib
import logging
from collections.abc import Sequence
from datetime import datetime

from clockmock.config import ClockMockConfig
from clockmock.exceptions import UnsupportedSurfaceError
from clockmock.instants import InstantLike, resolve_timezone, to_instant
from clockmock.patching import CallSiteOverride, SurfaceBinding, find_call_sites
from clockmock.state import CLOCK_STATE, FrozenClockState
from clockmock.surfaces import SUPPORTED_SURFACES, Surface


def resolve_surface(surface: Surface):
    """
    Import the module owning ``surface`` and return (module, genuine object).

    Raises:
        UnsupportedSurfaceError: If the module or attribute is unavailable
    """
    try:
        module = importlib.import_module(surface.module)
    except ImportError as e:
        raise UnsupportedSurfaceError(surface.name, f"module {surface.module} cannot be imported") from e

    try:
        original = getattr(module, surface.attribute)
    except AttributeError as e:
        raise UnsupportedSurfaceError(
            surface.name, f"{surface.module} has no attribute {surface.attribute}"
        ) from e

    return module, original


class InterceptionEngine:
    """
    Installs and removes the surface adapters.

    Example:
        >>> import time
        >>> engine = InterceptionEngine()
        >>> engine.freeze("2021-05-11T14:30:00Z")
        >>> int(time.time())
        1620743400
        >>> engine.reset()
    """

    def __init__(
        self,
        state: FrozenClockState | None = None,
        config: ClockMockConfig | None = None,
        surfaces: Sequence[Surface] = SUPPORTED_SURFACES,
        logger: logging.Logger | None = None,
    ):
        """
        Resolve every surface up front.

        Args:
            state: Clock state the adapters read from (process-wide CLOCK_STATE by default)
            config: Interception settings
            surfaces: Surfaces to intercept
            logger: Logger for install/uninstall messages

        Raises:
            UnsupportedSurfaceError: If any surface cannot be intercepted in this environment
        """
        self._state = state if state is not None else CLOCK_STATE
        self._config = config if config is not None else ClockMockConfig()
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._default_tz = resolve_timezone(self._config.default_timezone)
        self._surfaces = [(surface, *resolve_surface(surface)) for surface in surfaces]
        self._bindings: list[SurfaceBinding] = []

    @property
    def state(self) -> FrozenClockState:
        return self._state

    @property
    def config(self) -> ClockMockConfig:
        return self._config

    @property
    def is_active(self) -> bool:
        """True while the adapters are installed."""
        return bool(self._bindings)

    def installed_surfaces(self) -> list[str]:
        return [binding.surface for binding in self._bindings]

    def freeze(self, instant: InstantLike) -> None:
        """
        Freeze the clock at ``instant``.

        Calling freeze again while frozen only moves the frozen instant; the
        adapters stay installed as they are.

        Raises:
            InvalidInstantError: If ``instant`` cannot be normalized
        """
        frozen = to_instant(instant, self._default_tz)
        self._state.set(frozen)

        if self._bindings:
            self._logger.debug(f"Clock already frozen; moved frozen instant to {frozen.isoformat()}")
            return

        self._install()
        self._logger.debug(f"Clock frozen at {frozen.isoformat()}")

    def reset(self) -> None:
        """
        Restore the real clock. Does nothing when the clock is not frozen.

        Every override is undone before the state is cleared, so if undoing
        fails the engine still reports itself active and reset can be retried.
        """
        if not self._bindings:
            return

        while self._bindings:
            self._bindings[-1].uninstall()
            self._bindings.pop()

        self._state.clear()
        self._logger.debug("Clock reset to real time")

    def get_frozen_instant(self) -> datetime | None:
        return self._state.get()

    def _install(self) -> None:
        bindings: list[SurfaceBinding] = []
        try:
            bindings.extend(self._build_bindings())
            for binding in bindings:
                binding.install()
                self._bindings.append(binding)
        except Exception:
            self._logger.warning("Installing clock overrides failed; rolling back", exc_info=True)
            for binding in reversed(bindings):
                binding.uninstall()
            self._bindings.clear()
            self._state.clear()
            raise

        count = sum(len(binding.overrides) for binding in self._bindings)
        self._logger.debug(f"Installed {len(self._bindings)} surfaces with {count} overrides")

    def _build_bindings(self) -> list[SurfaceBinding]:
        originals = [original for _, _, original in self._surfaces]
        if self._config.scan_modules:
            call_sites = find_call_sites(originals, self._config.ignore)
        else:
            call_sites = {}

        bindings = []
        for surface, owner, original in self._surfaces:
            adapter = surface.adapter_factory(self._state, original)
            binding = SurfaceBinding(surface=surface.name, adapter=adapter)
            seen = {(id(owner), surface.attribute)}
            binding.overrides.append(CallSiteOverride(owner, surface.attribute, adapter))
            if surface.extra_overrides is not None:
                binding.overrides.extend(surface.extra_overrides(self._state, original))
            for module, attribute in call_sites.get(id(original), []):
                if (id(module), attribute) in seen:
                    continue
                seen.add((id(module), attribute))
                binding.overrides.append(CallSiteOverride(module, attribute, adapter))
            bindings.append(binding)
        return bindings


_default_engine: InterceptionEngine | None = None


def get_default_engine() -> InterceptionEngine:
    """Return the process-wide engine, creating it from the loaded configuration on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = InterceptionEngine(state=CLOCK_STATE, config=ClockMockConfig.load())
    return _default_engine


def set_default_engine(engine: InterceptionEngine | None) -> None:
    """Replace the process-wide engine (None rebuilds it lazily). The current one is reset first."""
    global _default_engine
    if _default_engine is not None:
        _default_engine.reset()
    _default_engine = engine


def freeze(instant: InstantLike) -> None:
    """Freeze every supported time surface at ``instant``."""
    get_default_engine().freeze(instant)


def reset() -> None:
    """Restore the real clock. Safe to call at any time."""
    get_default_engine().reset()


def get_frozen_instant() -> datetime | None:
    """Return the instant the clock is frozen at, or None."""
    return get_default_engine().get_frozen_instant()
