"""Expansion of a booking pattern into concrete calendar dates."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Optional

from tracking import t


def weekday_ordinal(day: date) -> int:
    """Return the weekday ordinal used by the remote service (0 = Sunday)."""

    return day.isoweekday() % 7


def expand_dates(
    initial_date: date,
    final_date: Optional[date] = None,
    weekdays: Optional[Iterable[int]] = None,
) -> List[date]:
    """Return the ordered dates a booking pattern occupies.

    Rules:
        * no ``final_date``: exactly ``[initial_date]``, any weekday set is ignored
        * ``final_date`` without weekdays: every date of the inclusive range
        * ``final_date`` with weekdays: dates of the range whose ordinal is in the set

    Callers validate the configuration first (see
    :func:`reservations.validation.validate_configuration`); this function
    raises ``ValueError`` for a reversed range or an empty weekday set rather
    than returning an empty list.
    """

    t('reservations.availability.expansion.expand_dates')

    if final_date is None:
        return [initial_date]

    if final_date < initial_date:
        raise ValueError(
            f"Final date {final_date.isoformat()} is before initial date {initial_date.isoformat()}"
        )

    wanted = None
    if weekdays is not None:
        wanted = set(weekdays)
        if not wanted:
            raise ValueError("Weekday set must not be empty for a date range")

    dates: List[date] = []
    current = initial_date
    while current <= final_date:
        if wanted is None or weekday_ordinal(current) in wanted:
            dates.append(current)
        current += timedelta(days=1)
    return dates
