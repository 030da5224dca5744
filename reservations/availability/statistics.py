"""Local computation of a simplified availability result."""

from __future__ import annotations

from datetime import date, datetime
from typing import AbstractSet, Iterable, List, Mapping, Optional, Sequence

from tracking import t

from reservations.availability.expansion import expand_dates
from reservations.models.availability import (
    AvailabilityConfiguration,
    AvailabilityStats,
    SimplifiedAvailabilityResult,
    SlotAvailability,
)
from reservations.models.reservation import TimeSlot


def compute_stats(
    dates: Sequence[date],
    timeslots: Sequence[TimeSlot],
    occupied: Mapping[date, AbstractSet[int]],
) -> AvailabilityStats:
    """Derive the aggregate counters for ``dates`` x ``timeslots``.

    A date with no time slots at all counts neither as fully available nor
    as fully occupied.
    """

    t('reservations.availability.statistics.compute_stats')

    total_dates = len(dates)
    total_timeslots = len(timeslots)
    total_slots = total_dates * total_timeslots

    available_slots = 0
    full_dates = 0
    empty_dates = 0
    for day in dates:
        taken = occupied.get(day, frozenset())
        free_today = sum(1 for slot in timeslots if slot.id not in taken)
        available_slots += free_today
        if total_timeslots == 0:
            continue
        if free_today == total_timeslots:
            full_dates += 1
        elif free_today == 0:
            empty_dates += 1

    percentage = 0.0 if total_slots == 0 else available_slots / total_slots * 100

    return AvailabilityStats(
        total_dates=total_dates,
        total_timeslots=total_timeslots,
        total_slots=total_slots,
        available_slots=available_slots,
        occupied_slots=total_slots - available_slots,
        global_availability_percentage=percentage,
        dates_with_full_availability=full_dates,
        dates_with_no_availability=empty_dates,
    )


def build_availability_result(
    config: AvailabilityConfiguration,
    timeslots: Sequence[TimeSlot],
    occupied: Mapping[date, Iterable[int]],
    *,
    queried_at: Optional[datetime] = None,
) -> SimplifiedAvailabilityResult:
    """Compute per-slot availability across every expanded date.

    Args:
        config: Facility unit and date pattern to evaluate.
        timeslots: Slots offered by the unit, in display order.
        occupied: Slot ids already taken, keyed by date. Missing dates are free.
        queried_at: Timestamp to stamp on the result.

    Returns:
        A :class:`SimplifiedAvailabilityResult` whose slots are available only
        when free on every date.
    """

    t('reservations.availability.statistics.build_availability_result')

    dates = expand_dates(config.initial_date, config.final_date, config.weekdays)
    taken = {day: frozenset(ids) for day, ids in occupied.items()}

    slots: List[SlotAvailability] = []
    for slot in timeslots:
        free_everywhere = all(slot.id not in taken.get(day, frozenset()) for day in dates)
        slots.append(
            SlotAvailability(
                id=slot.id,
                start_time=slot.start_time,
                end_time=slot.end_time,
                is_available_across_all_dates=free_everywhere,
            )
        )

    return SimplifiedAvailabilityResult(
        facility_unit_id=config.facility_unit_id,
        calculated_dates=tuple(dates),
        time_slots=slots,
        stats=compute_stats(dates, timeslots, taken),
        queried_at=queried_at,
        request=config,
    )
