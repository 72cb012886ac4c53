"""Civil-time helpers.

Every punch is stored as an absolute instant; all attendance rules are
evaluated on the wall clock of a single civil timezone (Philippine Standard
Time by default). The timezone is passed explicitly on every call so tests
and other deployments can substitute their own.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, tzinfo

import pytz

from timekeeping.exceptions import ValidationError

DEFAULT_CIVIL_TIMEZONE = "Asia/Manila"

NO_PUNCH_DISPLAY = "--:--"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")


def get_zone(tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE) -> tzinfo:
    """Resolve a timezone name (or pass through a tzinfo)."""
    if isinstance(tz, tzinfo):
        return tz
    try:
        return pytz.timezone(tz)
    except pytz.UnknownTimeZoneError:
        raise ValidationError("timezone", tz, "unknown timezone") from None


def _require_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValidationError("instant", instant, "naive datetime; an absolute time is required")
    return instant


def to_civil(instant: datetime, tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE) -> datetime:
    """Express an absolute instant as wall-clock time in the civil timezone."""
    return _require_aware(instant).astimezone(get_zone(tz))


def civil_date(instant: datetime, tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE) -> date:
    """Civil calendar date an instant falls on."""
    return to_civil(instant, tz).date()


def local_date(instant: datetime, tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE) -> str:
    """Render an instant as ``YYYY-MM-DD`` in the civil timezone."""
    return civil_date(instant, tz).isoformat()


def local_now(
    tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE,
    now: datetime | None = None,
) -> datetime:
    """Current time as civil wall-clock values.

    ``now`` lets callers (and tests) pin the instant being converted.
    """
    if now is None:
        now = datetime.now(pytz.utc)
    return to_civil(now, tz)


def civil_datetime(
    work_date: date,
    time_of_day: time,
    tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE,
) -> datetime:
    """Attach a civil date and wall-clock time to the civil timezone."""
    zone = get_zone(tz)
    naive = datetime.combine(work_date, time_of_day.replace(tzinfo=None))
    if hasattr(zone, "localize"):
        return zone.localize(naive)
    return naive.replace(tzinfo=zone)


def minutes_of_day(value: time | datetime) -> int:
    """Minutes since midnight, ignoring seconds."""
    return value.hour * 60 + value.minute


def _twelve_hour(hour: int, minute: int) -> str:
    suffix = "PM" if hour >= 12 else "AM"
    hour = hour % 12 or 12
    return f"{hour}:{minute:02d} {suffix}"


def format_clock(
    instant: datetime | None,
    tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE,
) -> str:
    """Render an instant as ``h:mm AM/PM`` civil time, or ``--:--`` if missing."""
    if instant is None:
        return NO_PUNCH_DISPLAY
    civil = to_civil(instant, tz)
    return _twelve_hour(civil.hour, civil.minute)


def format_time_of_day(value: str) -> str:
    """Convert a bare ``HH:mm`` string to 12-hour form ("13:00" -> "1:00 PM")."""
    if not value:
        return ""
    parsed = parse_time_of_day(value)
    return _twelve_hour(parsed.hour, parsed.minute)


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:mm`` (seconds tolerated) into a time."""
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValidationError("time_of_day", value, "expected HH:mm")
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise ValidationError("time_of_day", value, "out of range")
    return time(hour, minute, second)


def parse_civil_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string."""
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise ValidationError("date", value, "expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ValidationError("date", value, str(e)) from None


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 timestamp with an explicit offset (``Z`` allowed)."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        raise ValidationError("timestamp", value, "expected ISO-8601") from None
    return _require_aware(parsed)
