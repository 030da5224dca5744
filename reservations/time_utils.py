"""Date and time parsing helpers for reservation records and slots."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Tuple

import pytz

from tracking import t


def local_now(timezone: Optional[str] = None) -> datetime:
    """Return the current time in the facility timezone."""

    t('reservations.time_utils.local_now')

    if timezone is None:
        from infrastructure.settings import get_settings

        timezone = get_settings().timezone
    return datetime.now(pytz.timezone(timezone))


def local_today(timezone: Optional[str] = None) -> date:
    """Return today's date in the facility timezone."""

    t('reservations.time_utils.local_today')
    return local_now(timezone).date()


def parse_iso_date(value: object) -> date:
    """Parse ``YYYY-MM-DD`` or an ISO timestamp into a :class:`date`.

    Raises ``ValueError`` when the value cannot be interpreted.
    """

    t('reservations.time_utils.parse_iso_date')

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value.strip()) < 10:
        raise ValueError(f"Unparsable date: {value!r}")
    return date.fromisoformat(value.strip()[:10])


def parse_iso_datetime(value: object) -> Optional[datetime]:
    """Parse an ISO timestamp, returning ``None`` for empty or invalid input."""

    t('reservations.time_utils.parse_iso_datetime')

    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def normalise_time(value: str) -> str:
    """Trim ``HH:MM:SS`` wire times down to ``HH:MM``."""

    t('reservations.time_utils.normalise_time')
    value = value.strip()
    if len(value) >= 5 and value[2] == ":":
        return value[:5]
    return value


def has_time_passed(
    time_str: str,
    current_time: datetime,
) -> bool:
    """Return ``True`` when ``time_str`` is at or before ``current_time``."""

    t('reservations.time_utils.has_time_passed')

    try:
        hour, minute = _parse_time_string(time_str)
    except ValueError:
        return False
    return hour < current_time.hour or (
        hour == current_time.hour and minute <= current_time.minute
    )


def _parse_time_string(time_str: str) -> Tuple[int, int]:
    t('reservations.time_utils._parse_time_string')

    if ":" not in time_str:
        raise ValueError(f"Time string '{time_str}' missing colon separator")

    hour_str, minute_str = normalise_time(time_str).split(":")[:2]
    hour = int(hour_str)
    minute = int(minute_str)

    if not (0 <= hour <= 23):
        raise ValueError(f"Hour {hour} out of valid range 0-23")
    if not (0 <= minute <= 59):
        raise ValueError(f"Minute {minute} out of valid range 0-59")

    return hour, minute
