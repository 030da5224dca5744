from tracking import t
from datetime import date

import pytest

from infrastructure import wire
from infrastructure.transformers import (
    availability_from_wire,
    page_meta_from_wire,
    reservation_from_wire,
    reservations_from_payload,
    state_catalog_from_wire,
    state_from_wire,
)
from reservations.errors import ErrorKind, ReservationDomainError
from reservations.models.reservation import ReservationKind, ReservationState
from tests.helpers import reservation_payload


def _parse(**overrides):
    return reservation_from_wire(wire.ReservationWire.model_validate(reservation_payload(**overrides)))


def test_reservation_record_maps_to_entity():
    t('tests.unit.test_transformers.test_reservation_record_maps_to_entity')
    reservation = _parse()

    assert reservation.id == 1
    assert reservation.kind is ReservationKind.SINGLE
    assert reservation.state is ReservationState.PENDING
    assert reservation.start_date == date(2025, 3, 10)
    assert reservation.timeslots[0].start_time == "08:00"
    assert reservation.facility.scenario_name == "Parque Central"
    assert reservation.user_full_name == "Ana Rojas"
    assert reservation.created_at is not None


def test_state_name_is_authoritative_over_id():
    t('tests.unit.test_transformers.test_state_name_is_authoritative_over_id')
    reservation = _parse(reservationStateId=7, reservationState={'id': 7, 'name': 'CONFIRMADA'})

    assert reservation.state is ReservationState.CONFIRMED
    assert reservation.state_id == 7


def test_state_falls_back_to_default_id_then_pending():
    assert state_from_wire(None, 3) is ReservationState.REJECTED
    assert state_from_wire(None, 99) is ReservationState.PENDING
    assert state_from_wire(None) is ReservationState.PENDING


def test_unknown_state_name_is_invalid_data():
    with pytest.raises(ReservationDomainError) as excinfo:
        _parse(reservationState={'id': 9, 'name': 'ARCHIVADA'})

    assert excinfo.value.kind is ErrorKind.INVALID_DATA


def test_missing_id_or_unit_fails_fast():
    t('tests.unit.test_transformers.test_missing_id_or_unit_fails_fast')
    with pytest.raises(ReservationDomainError, match="missing or invalid id"):
        _parse(id=None)

    with pytest.raises(ReservationDomainError, match="facility unit"):
        _parse(subScenarioId=None, subScenario=None)


def test_zero_total_instances_is_invalid_data():
    with pytest.raises(ReservationDomainError) as excinfo:
        _parse(totalInstances=0)
    assert excinfo.value.kind is ErrorKind.INVALID_DATA

    assert _parse(totalInstances=None).total_instances == 1


def test_single_record_drops_stray_range_fields():
    reservation = _parse(finalDate="2025-03-20", weekDays=[1, 2])

    assert reservation.end_date is None
    assert reservation.weekday_mask is None


def test_range_record_without_weekdays_covers_every_day():
    t('tests.unit.test_transformers.test_range_record_without_weekdays_covers_every_day')
    reservation = _parse(type="RANGE", finalDate="2025-03-12", weekDays=None, totalInstances=3)

    assert reservation.weekday_mask == frozenset(range(7))
    assert reservation.occupied_dates() == [date(2025, 3, 10), date(2025, 3, 11), date(2025, 3, 12)]


def test_payload_accepts_single_record_or_list():
    t('tests.unit.test_transformers.test_payload_accepts_single_record_or_list')
    single = reservations_from_payload(reservation_payload())
    many = reservations_from_payload([reservation_payload(id=1), reservation_payload(id=2)])

    assert [r.id for r in single] == [1]
    assert [r.id for r in many] == [1, 2]

    with pytest.raises(ReservationDomainError):
        reservations_from_payload("not a record")


def test_page_meta_fallback_without_meta():
    meta = page_meta_from_wire(None, fallback_limit=6, item_count=4)

    assert (meta.page, meta.limit, meta.total_items, meta.total_pages) == (1, 6, 4, 1)

    parsed = page_meta_from_wire(
        wire.PageMetaWire.model_validate({'page': 2, 'limit': 10, 'totalItems': 25, 'totalPages': 3}),
        fallback_limit=6,
        item_count=10,
    )
    assert (parsed.page, parsed.limit, parsed.total_items, parsed.total_pages) == (2, 10, 25, 3)


def test_availability_wire_maps_to_result():
    t('tests.unit.test_transformers.test_availability_wire_maps_to_result')
    envelope = wire.AVAILABILITY.validate_python({
        'statusCode': 200,
        'data': {
            'subScenarioId': 10,
            'calculatedDates': ['2025-03-10', '2025-03-12'],
            'timeSlots': [
                {'id': 1, 'startTime': '08:00:00', 'endTime': '09:00:00', 'isAvailableInAllDates': True},
                {'id': 2, 'startTime': '09:00:00', 'endTime': '10:00:00', 'isAvailableInAllDates': False},
            ],
            'stats': {
                'totalDates': 2,
                'totalTimeslots': 2,
                'totalSlots': 4,
                'availableSlots': 3,
                'occupiedSlots': 1,
                'globalAvailabilityPercentage': 75.0,
                'datesWithFullAvailability': 1,
                'datesWithNoAvailability': 0,
            },
            'queriedAt': '2025-03-09T10:00:00Z',
        },
    })

    result = availability_from_wire(envelope.data)

    assert result.calculated_dates == (date(2025, 3, 10), date(2025, 3, 12))
    assert result.available_slot_ids() == [1]
    assert result.slot(2).start_time == "09:00"
    assert result.stats.global_availability_percentage == 75.0


def test_state_catalog_skips_unknown_names():
    items = [
        wire.ReservationStateOptionWire.model_validate({'id': 11, 'name': 'PENDIENTE'}),
        wire.ReservationStateOptionWire.model_validate({'id': 12, 'state': 'CONFIRMADA'}),
        wire.ReservationStateOptionWire.model_validate({'id': 13, 'name': 'EN REVISION'}),
    ]

    catalog = state_catalog_from_wire(items)

    assert catalog == {ReservationState.PENDING: 11, ReservationState.CONFIRMED: 12}
