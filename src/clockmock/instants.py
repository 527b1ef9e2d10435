"""
Frozen instant values.

A frozen instant is always a timezone-aware, genuine ``datetime.datetime``.
This module turns the loosely typed values tests like to write (ISO strings,
epoch numbers, naive datetimes) into that form and derives the epoch
representations the time surfaces report.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.parser import isoparse
from returns.result import Failure, Result, Success

from clockmock.exceptions import InvalidInstantError


InstantLike = datetime | date | str | int | float

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_ONE_MICROSECOND = timedelta(microseconds=1)


def resolve_timezone(name: str) -> tzinfo:
    """
    Look up a timezone by IANA name.

    "UTC" never touches the tz database so it works on hosts without tzdata.

    Raises:
        InvalidInstantError: If the zone is unknown
    """
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInstantError(f"Unknown timezone: {name}") from e


def copy_instant(value: datetime) -> datetime:
    """Return a genuine ``datetime`` equal to ``value``, even if ``value`` is a subclass."""
    return datetime(
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


def to_instant(value: InstantLike, default_tz: tzinfo = timezone.utc) -> datetime:
    """
    Normalize ``value`` into a timezone-aware frozen instant.

    Args:
        value: Aware or naive datetime, date, ISO-8601 string, or epoch seconds
        default_tz: Zone applied to naive datetimes, dates and offset-less strings

    Returns:
        A genuine, timezone-aware datetime

    Raises:
        InvalidInstantError: If the value has an unsupported type or cannot be parsed

    Examples:
        >>> to_instant("2021-05-11T14:30:00Z")
        datetime.datetime(2021, 5, 11, 14, 30, tzinfo=tzutc())
        >>> to_instant(0)
        datetime.datetime(1970, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, bool):
        raise InvalidInstantError(f"Cannot freeze time at a boolean: {value!r}")

    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, date):
        instant = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            instant = isoparse(value.strip())
        except (ValueError, OverflowError) as e:
            raise InvalidInstantError(f"Invalid ISO-8601 instant: {value!r}") from e
    elif isinstance(value, (int, float)):
        try:
            instant = EPOCH + timedelta(seconds=value)
        except OverflowError as e:
            raise InvalidInstantError(f"Epoch value out of range: {value!r}") from e
    else:
        raise InvalidInstantError(
            f"Cannot freeze time at a {type(value).__name__}; "
            "expected datetime, date, ISO-8601 string or epoch seconds"
        )

    if instant.tzinfo is None or instant.utcoffset() is None:
        instant = instant.replace(tzinfo=default_tz)

    return copy_instant(instant)


def parse_instant(text: str, default_tz: tzinfo = timezone.utc) -> Result[datetime, str]:
    """
    Parse user input (e.g. a command line value) into an instant.

    Plain numbers are read as epoch seconds, anything else as ISO-8601.

    Returns:
        Success(datetime) on success, Failure(error message) otherwise
    """
    candidate: InstantLike = text
    try:
        candidate = float(text) if "." in text else int(text)
    except ValueError:
        pass

    try:
        return Success(to_instant(candidate, default_tz))
    except InvalidInstantError as e:
        return Failure(str(e))


def epoch_seconds(instant: datetime) -> float:
    """Fractional seconds since the Unix epoch, microsecond precision."""
    return instant.timestamp()


def epoch_nanoseconds(instant: datetime) -> int:
    """Integer nanoseconds since the Unix epoch, computed without float rounding."""
    return (instant - EPOCH) // _ONE_MICROSECOND * 1000


def local_wall_time(instant: datetime) -> datetime:
    """The naive local wall time of ``instant``, as a naive ``datetime.now()`` reports it."""
    return instant.astimezone().replace(tzinfo=None)
