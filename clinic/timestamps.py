"""
Timestamp normalization at the persistence and response boundaries.

Every timestamp is stored in one reference zone (UTC).  Values typed by a
user arrive as naive wall-clock strings in some display zone and are
canonicalized on the way in; values leaving the API are either rendered
back into a display zone (``present``) or, for audit-style fields such as
``createdAt``, emitted as ISO-8601 UTC (``to_external_format``).

The canonical textual form is ``YYYY-MM-DD HH:MM:SS``.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings
from django.utils import dateparse, timezone

from .exceptions import InvalidTimestamp

REFERENCE_ZONE = dt_timezone.utc
CANONICAL_FORMAT = '%Y-%m-%d %H:%M:%S'
DATE_FORMAT = '%Y-%m-%d'

Zone = Union[str, dt_timezone, ZoneInfo, None]
Moment = Union[str, datetime, date]


def get_zone(zone: Zone = None):
    """Resolve ``zone`` (IANA name or tzinfo) with the display zone as default."""
    if zone is None or zone == '':
        zone = settings.DISPLAY_TIME_ZONE
    if not isinstance(zone, str):
        return zone
    if zone.upper() == 'UTC':
        return REFERENCE_ZONE
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidTimestamp(f'Unknown time zone: {zone}')


def _parse(value: Moment) -> datetime:
    """Parse ``value`` into a ``datetime`` that may or may not be aware."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        raise InvalidTimestamp(f'Invalid date/time: {value!r}')
    text = value.strip()
    try:
        parsed = dateparse.parse_datetime(text)
        if parsed is None:
            day = dateparse.parse_date(text)
            if day is not None:
                parsed = datetime.combine(day, time.min)
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidTimestamp(f'Invalid date/time: {value!r}')
    return parsed


def localize(value: Moment, zone: Zone = None) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive input is read as wall-clock time in ``zone``; input that already
    carries an offset keeps it.
    """
    parsed = _parse(value)
    if timezone.is_naive(parsed):
        parsed = parsed.replace(tzinfo=get_zone(zone))
    return parsed.astimezone(REFERENCE_ZONE)


def reference_datetime(value: Moment) -> datetime:
    """Read a stored value (naive means UTC) as an aware UTC datetime."""
    return localize(value, REFERENCE_ZONE)


def canonicalize(local_value: Moment, zone: Zone = None) -> str:
    """Convert a wall-clock value in ``zone`` to the canonical UTC string."""
    return localize(local_value, zone).strftime(CANONICAL_FORMAT)


def present(reference_value: Optional[Moment], zone: Zone = None) -> Optional[str]:
    """Render a stored UTC value as wall-clock time in ``zone``."""
    if reference_value is None or reference_value == '':
        return None
    return reference_datetime(reference_value).astimezone(get_zone(zone)).strftime(CANONICAL_FORMAT)


def to_external_format(value: Optional[Moment]) -> Optional[str]:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2024-01-01T00:00:00.000Z``."""
    if value is None or value == '':
        return None
    moment = reference_datetime(value)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f'{moment.microsecond // 1000:03d}Z'


def combine_date_and_time(day: Union[str, date], at: Union[str, time], zone: Zone = None) -> str:
    """Join a date field and a time field entered in ``zone`` into one canonical value."""
    if isinstance(day, str):
        try:
            parsed_day = dateparse.parse_date(day.strip())
        except ValueError:
            parsed_day = None
        if parsed_day is None:
            raise InvalidTimestamp(f'Invalid date: {day!r}')
        day = parsed_day
    if isinstance(at, str):
        try:
            parsed_time = dateparse.parse_time(at.strip())
        except ValueError:
            parsed_time = None
        if parsed_time is None:
            raise InvalidTimestamp(f'Invalid time: {at!r}')
        at = parsed_time
    return canonicalize(datetime.combine(day, at.replace(tzinfo=None)), zone)


def split_display(reference_value: Moment, zone: Zone = None) -> Tuple[str, str]:
    """Return the ``(date, time)`` pair a booking form shows for a stored instant."""
    day, at = present(reference_value, zone).split(' ')
    return day, at[:5]


def display_day_bounds(day: Union[str, date, None] = None, zone: Zone = None) -> Tuple[datetime, datetime]:
    """UTC ``[start, end)`` of a calendar day in ``zone`` (today by default)."""
    tz = get_zone(zone)
    if day is None:
        day = timezone.now().astimezone(tz).date()
    elif isinstance(day, str):
        parsed = dateparse.parse_date(day)
        if parsed is None:
            raise InvalidTimestamp(f'Invalid date: {day!r}')
        day = parsed
    start = datetime.combine(day, time.min).replace(tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min).replace(tzinfo=tz)
    return start.astimezone(REFERENCE_ZONE), end.astimezone(REFERENCE_ZONE)


def current_reference() -> str:
    return timezone.now().astimezone(REFERENCE_ZONE).strftime(CANONICAL_FORMAT)


def current_reference_date() -> str:
    return timezone.now().astimezone(REFERENCE_ZONE).strftime(DATE_FORMAT)


def current_display_date(zone: Zone = None) -> date:
    return timezone.now().astimezone(get_zone(zone)).date()


def is_valid_date(value: str) -> bool:
    """Strict ``YYYY-MM-DD`` check."""
    try:
        datetime.strptime(value, DATE_FORMAT)
    except (TypeError, ValueError):
        return False
    return True


def calculate_age(dob: Union[str, date], today: Optional[date] = None) -> int:
    if isinstance(dob, str):
        dob = _parse(dob).date()
    today = today or current_display_date()
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return years
