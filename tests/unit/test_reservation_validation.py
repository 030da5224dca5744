from tracking import t
from datetime import date, datetime

import pytest

from reservations.availability.statistics import build_availability_result
from reservations.errors import ErrorKind, ReservationDomainError
from reservations.models.availability import AvailabilityConfiguration
from reservations.models.reservation import ReservationDraft, TimeSlot
from reservations.validation import (
    validate_date_pattern,
    validate_draft,
    validate_id,
    validate_weekdays,
)


NOW = datetime(2025, 3, 10, 9, 30)
SLOTS = [
    TimeSlot(id=1, start_time="08:00", end_time="09:00"),
    TimeSlot(id=2, start_time="10:00", end_time="11:00"),
]


def _draft(**overrides):
    fields = {
        "facility_unit_id": 10,
        "timeslot_ids": (2,),
        "initial_date": date(2025, 3, 10),
    }
    fields.update(overrides)
    return ReservationDraft(**fields)


def test_validate_id_rejects_non_positive_and_bool():
    t('tests.unit.test_reservation_validation.test_validate_id_rejects_non_positive_and_bool')
    assert validate_id(3) == 3
    for value in (0, -1, True, "3", None):
        with pytest.raises(ReservationDomainError) as excinfo:
            validate_id(value)
        assert excinfo.value.kind is ErrorKind.VALIDATION


def test_validate_weekdays_range():
    validate_weekdays(None)
    validate_weekdays([0, 6])
    with pytest.raises(ReservationDomainError):
        validate_weekdays([7])


def test_validate_date_pattern_rules():
    t('tests.unit.test_reservation_validation.test_validate_date_pattern_rules')
    validate_date_pattern(date(2025, 3, 10), None, None)
    validate_date_pattern(date(2025, 3, 10), None, [])

    with pytest.raises(ReservationDomainError, match="requires a final date"):
        validate_date_pattern(date(2025, 3, 10), None, [1, 3])
    with pytest.raises(ReservationDomainError, match="before initial date"):
        validate_date_pattern(date(2025, 3, 10), date(2025, 3, 9), None)
    with pytest.raises(ReservationDomainError, match="at least one weekday"):
        validate_date_pattern(date(2025, 3, 10), date(2025, 3, 20), [])
    with pytest.raises(ReservationDomainError, match="do not occur"):
        validate_date_pattern(date(2025, 3, 10), date(2025, 3, 11), [5])
    with pytest.raises(ReservationDomainError, match="date is required"):
        validate_date_pattern(None, None, None)


def test_validate_draft_accepts_future_slot_today():
    t('tests.unit.test_reservation_validation.test_validate_draft_accepts_future_slot_today')
    validate_draft(_draft(), now=NOW, timeslots=SLOTS)


def test_validate_draft_requires_a_slot():
    with pytest.raises(ReservationDomainError, match="at least one time slot"):
        validate_draft(_draft(timeslot_ids=()), now=NOW)


def test_validate_draft_rejects_past_dates_and_started_slots():
    t('tests.unit.test_reservation_validation.test_validate_draft_rejects_past_dates_and_started_slots')
    with pytest.raises(ReservationDomainError, match="past date"):
        validate_draft(_draft(initial_date=date(2025, 3, 9)), now=NOW)

    with pytest.raises(ReservationDomainError) as excinfo:
        validate_draft(_draft(timeslot_ids=(1, 2)), now=NOW, timeslots=SLOTS)
    assert "08:00 - 09:00" in excinfo.value.message


def test_validate_draft_uses_availability_as_local_guard():
    t('tests.unit.test_reservation_validation.test_validate_draft_uses_availability_as_local_guard')
    config = AvailabilityConfiguration(
        facility_unit_id=10,
        initial_date=date(2025, 3, 11),
        final_date=date(2025, 3, 12),
    )
    availability = build_availability_result(config, SLOTS, {date(2025, 3, 12): [2]})
    draft = _draft(initial_date=date(2025, 3, 11), final_date=date(2025, 3, 12))

    with pytest.raises(ReservationDomainError, match=r"\[2\]"):
        validate_draft(draft, now=NOW, availability=availability)


def test_validate_draft_limits_comment_length():
    with pytest.raises(ReservationDomainError, match="500"):
        validate_draft(_draft(comments="x" * 501), now=NOW)
