"""Local checks run before any request reaches the remote service."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from tracking import t

from infrastructure import constants
from reservations.availability.expansion import expand_dates
from reservations.errors import validation_error
from reservations.models.availability import AvailabilityConfiguration, SimplifiedAvailabilityResult
from reservations.models.reservation import ReservationDraft, TimeSlot
from reservations.time_utils import has_time_passed


def validate_id(value: object, label: str = "reservation id") -> int:
    """Return ``value`` as a positive int or raise a validation error."""

    t('reservations.validation.validate_id')
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise validation_error(f"Invalid {label}: {value!r}")
    return value


def validate_ids(values: Iterable[object], label: str = "reservation id") -> list:
    t('reservations.validation.validate_ids')
    return [validate_id(value, label) for value in values]


def validate_weekdays(weekdays: Optional[Iterable[int]]) -> None:
    t('reservations.validation.validate_weekdays')
    if weekdays is None:
        return
    invalid = [day for day in weekdays if day not in constants.WEEKDAY_ORDINALS]
    if invalid:
        raise validation_error(f"Weekday ordinals must be between 0 and 6, got {invalid}")


def validate_date_pattern(
    initial_date: Optional[date],
    final_date: Optional[date],
    weekdays: Optional[Sequence[int]],
) -> None:
    """Check a date/weekday pattern; raises a validation error on failure.

    A pattern without ``final_date`` is a single date; it may not carry a
    non-empty weekday set since a recurring pattern needs an end. A range
    must not be reversed, must not carry an empty weekday set and must
    produce at least one date.
    """

    t('reservations.validation.validate_date_pattern')

    if initial_date is None:
        raise validation_error("A reservation date is required")
    if final_date is None:
        if weekdays:
            raise validation_error("A recurring weekday pattern requires a final date")
        return

    if final_date < initial_date:
        raise validation_error(
            f"Final date {final_date.isoformat()} is before initial date {initial_date.isoformat()}"
        )
    if weekdays is not None and len(weekdays) == 0:
        raise validation_error("Select at least one weekday for a date range")
    validate_weekdays(weekdays)

    if not expand_dates(initial_date, final_date, weekdays):
        raise validation_error("The selected weekdays do not occur within the date range")


def validate_configuration(config: AvailabilityConfiguration) -> None:
    """Validate an availability query before it is sent."""

    t('reservations.validation.validate_configuration')
    validate_id(config.facility_unit_id, "facility unit id")
    validate_date_pattern(config.initial_date, config.final_date, config.weekdays)


def validate_draft(
    draft: ReservationDraft,
    *,
    now: datetime,
    timeslots: Optional[Sequence[TimeSlot]] = None,
    availability: Optional[SimplifiedAvailabilityResult] = None,
) -> None:
    """Run every pre-submission check on a booking request.

    Args:
        draft: The booking request.
        now: Current facility-local time; used to reject slots already past today.
        timeslots: Slot catalogue for the unit, needed for the past-slot check.
        availability: Advisory availability; selected slots it marks unavailable
            are rejected locally.
    """

    t('reservations.validation.validate_draft')

    validate_id(draft.facility_unit_id, "facility unit id")
    if not draft.timeslot_ids:
        raise validation_error("Select at least one time slot")
    validate_ids(draft.timeslot_ids, "time slot id")
    validate_date_pattern(draft.initial_date, draft.final_date, draft.weekdays)

    if draft.initial_date < now.date():
        raise validation_error(f"Cannot book a past date: {draft.initial_date.isoformat()}")

    if draft.initial_date == now.date() and timeslots:
        by_id = {slot.id: slot for slot in timeslots}
        past = [
            slot_id for slot_id in draft.timeslot_ids
            if slot_id in by_id and has_time_passed(by_id[slot_id].start_time, now)
        ]
        if past:
            labels = ", ".join(str(by_id[slot_id]) for slot_id in past)
            raise validation_error(f"These time slots have already started today: {labels}")

    if availability is not None:
        available = set(availability.available_slot_ids())
        unavailable = [
            slot_id for slot_id in draft.timeslot_ids
            if slot_id not in available
        ]
        if unavailable:
            raise validation_error(
                f"Time slots {unavailable} are not available on every selected date"
            )

    if draft.comments is not None and len(draft.comments) > constants.MAX_JUSTIFICATION_LENGTH:
        raise validation_error(
            f"Comments cannot exceed {constants.MAX_JUSTIFICATION_LENGTH} characters"
        )
