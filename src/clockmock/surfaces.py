"""
Surface adapters.

A surface is one time-retrieval entry point that code under test may call
(``time.time``, ``datetime.datetime`` ...). For each surface this module
provides an adapter factory: given the shared FrozenClockState and the genuine
object being replaced, it returns the replacement to install.

Adapters only change what "now" means. Whenever the caller passes an explicit
timestamp the genuine implementation answers, and when the state is empty
(an adapter reference kept alive after reset) the real clock answers.
"""

import datetime as _datetime
import functools
import time as _time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dateutil.tz import gettz

from clockmock.instants import epoch_nanoseconds, epoch_seconds, local_wall_time
from clockmock.patching import CallSiteOverride, ReducerOverride
from clockmock.state import CLOCK_STATE, FrozenClockState


real_date = _datetime.date
real_datetime = _datetime.datetime
real_localtime = _time.localtime


class SurfaceKind(Enum):
    """Categories of time-retrieval surfaces."""

    EPOCH_NANOSECONDS = "epoch-nanoseconds"
    EPOCH_SECONDS = "epoch-seconds"
    FORMATTED = "formatted"
    STRUCTURED = "structured"
    RELATIVE_PARSER = "relative-parser"
    VALUE_TYPE = "value-type"


AdapterFactory = Callable[[FrozenClockState, Any], Any]
OverridesFactory = Callable[[FrozenClockState, Any], list]


@dataclass(frozen=True)
class Surface:
    """
    A time-retrieval entry point and how to replace it.

    Attributes:
        name: Dotted name used in logs and listings (e.g. "time.strftime")
        kind: Category of the surface
        module: Module that owns the genuine object
        attribute: Attribute name of the genuine object on ``module``
        adapter_factory: Builds the replacement from (state, genuine object)
        extra_overrides: Builds further overrides installed with the surface
    """

    name: str
    kind: SurfaceKind
    module: str
    attribute: str
    adapter_factory: AdapterFactory
    extra_overrides: OverridesFactory | None = None


# ---------------------------------------------------------------------------
# Function adapters
# ---------------------------------------------------------------------------

def epoch_seconds_adapter(state: FrozenClockState, original: Callable[[], float]) -> Callable[[], float]:
    @functools.wraps(original)
    def frozen_time() -> float:
        instant = state.get()
        if instant is None:
            return original()
        return epoch_seconds(instant)

    return frozen_time


def epoch_nanoseconds_adapter(state: FrozenClockState, original: Callable[[], int]) -> Callable[[], int]:
    @functools.wraps(original)
    def frozen_time_ns() -> int:
        instant = state.get()
        if instant is None:
            return original()
        return epoch_nanoseconds(instant)

    return frozen_time_ns


def struct_time_adapter(state: FrozenClockState, original: Callable) -> Callable:
    """Adapter for ``localtime``/``gmtime`` style readers taking optional epoch seconds."""

    @functools.wraps(original)
    def frozen_struct_time(secs: float | None = None) -> _time.struct_time:
        instant = state.get()
        if secs is None and instant is not None:
            secs = epoch_seconds(instant)
        return original(secs)

    return frozen_struct_time


def ctime_adapter(state: FrozenClockState, original: Callable) -> Callable:
    @functools.wraps(original)
    def frozen_ctime(secs: float | None = None) -> str:
        instant = state.get()
        if secs is None and instant is not None:
            secs = epoch_seconds(instant)
        return original(secs)

    return frozen_ctime


def strftime_adapter(state: FrozenClockState, original: Callable) -> Callable:
    @functools.wraps(original)
    def frozen_strftime(format: str, t: tuple | _time.struct_time | None = None) -> str:
        if t is None:
            instant = state.get()
            if instant is None:
                return original(format)
            t = real_localtime(epoch_seconds(instant))
        return original(format, t)

    return frozen_strftime


def asctime_adapter(state: FrozenClockState, original: Callable) -> Callable:
    @functools.wraps(original)
    def frozen_asctime(t: tuple | _time.struct_time | None = None) -> str:
        if t is None:
            instant = state.get()
            if instant is None:
                return original()
            t = real_localtime(epoch_seconds(instant))
        return original(t)

    return frozen_asctime


def relative_parser_adapter(state: FrozenClockState, original: Callable) -> Callable:
    """
    Adapter for ``dateutil.parser.parse``.

    dateutil fills the components missing from ``timestr`` from ``default``,
    which it otherwise derives from today's local midnight. While frozen the
    same rule is applied to the frozen instant.
    """

    @functools.wraps(original)
    def frozen_parse(timestr, parserinfo=None, **kwargs):
        instant = state.get()
        if instant is not None and kwargs.get("default") is None:
            kwargs["default"] = local_wall_time(instant).replace(
                hour=0, minute=0, second=0, microsecond=0
            )
        return original(timestr, parserinfo, **kwargs)

    return frozen_parse


def relative_base(instant, timezone_name: str | None = None) -> real_datetime:
    """
    The naive wall time of ``instant`` in the zone dateparser will read it in.

    dateparser interprets a naive ``RELATIVE_BASE`` in its ``TIMEZONE`` setting,
    which defaults to the local zone.
    """
    if timezone_name and timezone_name.lower() != "local":
        zone = gettz(timezone_name)
        if zone is not None:
            return instant.astimezone(zone).replace(tzinfo=None)
    return local_wall_time(instant)


def relative_expression_adapter(state: FrozenClockState, original: Callable) -> Callable:
    """
    Adapter for ``dateparser.parse``.

    Relative expressions such as "in 1 day" or "2 hours ago" are resolved
    against ``settings["RELATIVE_BASE"]``, or against the current time when no
    base is given. While frozen a missing base becomes the frozen instant; a
    caller-supplied base is left alone.
    """

    @functools.wraps(original)
    def frozen_dateparser_parse(
        date_string,
        date_formats=None,
        languages=None,
        locales=None,
        region=None,
        settings=None,
        detect_languages_function=None,
    ):
        instant = state.get()
        if instant is not None and (settings is None or isinstance(settings, dict)):
            if not (settings or {}).get("RELATIVE_BASE"):
                settings = dict(settings or {})
                settings["RELATIVE_BASE"] = relative_base(instant, settings.get("TIMEZONE"))
        return original(
            date_string,
            date_formats=date_formats,
            languages=languages,
            locales=locales,
            region=region,
            settings=settings,
            detect_languages_function=detect_languages_function,
        )

    return frozen_dateparser_parse


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

class FrozenDateMeta(type):
    def __instancecheck__(cls, obj):
        return isinstance(obj, real_date)

    def __subclasscheck__(cls, subclass):
        return issubclass(subclass, real_date)


class FrozenDateTimeMeta(type):
    def __instancecheck__(cls, obj):
        return isinstance(obj, real_datetime)

    def __subclasscheck__(cls, subclass):
        return issubclass(subclass, real_datetime)


class FrozenDate(real_date, metaclass=FrozenDateMeta):
    """
    Stand-in for ``datetime.date`` while the clock is frozen.

    ``today()`` consults the bound clock state on every call, so dates created
    while frozen keep answering with the current frozen instant.
    """

    _clock_state: FrozenClockState = CLOCK_STATE

    @classmethod
    def today(cls):
        instant = cls._clock_state.get()
        if instant is None:
            return super().today()
        local = local_wall_time(instant)
        return cls(local.year, local.month, local.day)


class FrozenDateTime(real_datetime, metaclass=FrozenDateTimeMeta):
    """
    Stand-in for ``datetime.datetime`` while the clock is frozen.

    ``now()``, ``today()`` and ``utcnow()`` resolve against the bound clock
    state at call time; everything else is inherited from the real type.
    """

    _clock_state: FrozenClockState = CLOCK_STATE

    @classmethod
    def _from_wall_time(cls, value: real_datetime) -> "FrozenDateTime":
        return cls(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond,
            tzinfo=value.tzinfo,
            fold=value.fold,
        )

    @classmethod
    def now(cls, tz=None):
        instant = cls._clock_state.get()
        if instant is None:
            return super().now(tz)
        if tz is None:
            return cls._from_wall_time(local_wall_time(instant))
        return cls._from_wall_time(instant.astimezone(tz))

    @classmethod
    def today(cls):
        return cls.now()

    @classmethod
    def utcnow(cls):
        instant = cls._clock_state.get()
        if instant is None:
            return cls.now(_datetime.timezone.utc).replace(tzinfo=None)
        return cls._from_wall_time(instant.astimezone(_datetime.timezone.utc).replace(tzinfo=None))


def date_type_adapter(state: FrozenClockState, original: type) -> type:
    return FrozenDate


def datetime_type_adapter(state: FrozenClockState, original: type) -> type:
    return FrozenDateTime


def reduce_date(value: real_date):
    return FrozenDate, value.__reduce_ex__(4)[1]


def reduce_datetime(value: real_datetime):
    return FrozenDateTime, value.__reduce_ex__(4)[1]


def date_type_overrides(state: FrozenClockState, original: type) -> list:
    """Bind the stand-in to ``state`` and keep genuine dates picklable."""
    return [
        CallSiteOverride(FrozenDate, "_clock_state", state),
        ReducerOverride(original, reduce_date),
    ]


def datetime_type_overrides(state: FrozenClockState, original: type) -> list:
    """Bind the stand-in to ``state`` and keep genuine datetimes picklable."""
    return [
        CallSiteOverride(FrozenDateTime, "_clock_state", state),
        ReducerOverride(original, reduce_datetime),
    ]


SUPPORTED_SURFACES: tuple[Surface, ...] = (
    Surface("time.time", SurfaceKind.EPOCH_SECONDS, "time", "time", epoch_seconds_adapter),
    Surface("time.time_ns", SurfaceKind.EPOCH_NANOSECONDS, "time", "time_ns", epoch_nanoseconds_adapter),
    Surface("time.localtime", SurfaceKind.STRUCTURED, "time", "localtime", struct_time_adapter),
    Surface("time.gmtime", SurfaceKind.STRUCTURED, "time", "gmtime", struct_time_adapter),
    Surface("time.strftime", SurfaceKind.FORMATTED, "time", "strftime", strftime_adapter),
    Surface("time.ctime", SurfaceKind.FORMATTED, "time", "ctime", ctime_adapter),
    Surface("time.asctime", SurfaceKind.FORMATTED, "time", "asctime", asctime_adapter),
    Surface(
        "dateutil.parser.parse",
        SurfaceKind.RELATIVE_PARSER,
        "dateutil.parser",
        "parse",
        relative_parser_adapter,
    ),
    Surface("dateparser.parse", SurfaceKind.RELATIVE_PARSER, "dateparser", "parse", relative_expression_adapter),
    Surface(
        "datetime.datetime",
        SurfaceKind.VALUE_TYPE,
        "datetime",
        "datetime",
        datetime_type_adapter,
        datetime_type_overrides,
    ),
    Surface("datetime.date", SurfaceKind.VALUE_TYPE, "datetime", "date", date_type_adapter, date_type_overrides),
)
