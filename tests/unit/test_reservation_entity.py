from tracking import t
from datetime import date

import pytest

from reservations.errors import ErrorKind, ReservationDomainError
from reservations.models.reservation import (
    ReservationDraft,
    ReservationKind,
    ReservationState,
    TimeSlot,
)
from tests.helpers import make_reservation


def test_single_reservation_rejects_end_date():
    t('tests.unit.test_reservation_entity.test_single_reservation_rejects_end_date')
    with pytest.raises(ReservationDomainError) as excinfo:
        make_reservation(end_date=date(2025, 3, 12))

    assert excinfo.value.kind is ErrorKind.INVALID_DATA


def test_range_reservation_requires_end_date_and_weekdays():
    t('tests.unit.test_reservation_entity.test_range_reservation_requires_end_date_and_weekdays')
    with pytest.raises(ReservationDomainError):
        make_reservation(kind=ReservationKind.RANGE, weekday_mask=frozenset({1}))

    with pytest.raises(ReservationDomainError):
        make_reservation(kind=ReservationKind.RANGE, end_date=date(2025, 3, 20))

    with pytest.raises(ReservationDomainError):
        make_reservation(
            kind=ReservationKind.RANGE,
            end_date=date(2025, 3, 1),
            weekday_mask=frozenset({1}),
        )


def test_invalid_id_and_weekday_ordinals_are_rejected():
    t('tests.unit.test_reservation_entity.test_invalid_id_and_weekday_ordinals_are_rejected')
    with pytest.raises(ReservationDomainError):
        make_reservation(id=0)

    with pytest.raises(ReservationDomainError):
        make_reservation(
            kind=ReservationKind.RANGE,
            end_date=date(2025, 3, 20),
            weekday_mask=frozenset({7}),
        )


def test_is_active_depends_on_state_and_start_date():
    reservation = make_reservation(start_date=date(2025, 3, 10))

    assert reservation.is_active(today=date(2025, 3, 10)) is True
    assert reservation.is_active(today=date(2025, 3, 11)) is False
    cancelled = make_reservation(state=ReservationState.CANCELLED, state_id=4)
    assert cancelled.is_active(today=date(2025, 1, 1)) is False


def test_can_be_modified_only_for_active_pending_or_confirmed():
    t('tests.unit.test_reservation_entity.test_can_be_modified_only_for_active_pending_or_confirmed')
    today = date(2025, 3, 1)

    assert make_reservation().can_be_modified(today) is True
    assert make_reservation(state=ReservationState.CONFIRMED, state_id=2).can_be_modified(today) is True
    assert make_reservation(state=ReservationState.REJECTED, state_id=3).can_be_modified(today) is False
    assert make_reservation().can_be_modified(date(2025, 4, 1)) is False


def test_matches_search_query_is_case_insensitive():
    t('tests.unit.test_reservation_entity.test_matches_search_query_is_case_insensitive')
    reservation = make_reservation(comments="Torneo interno")

    assert reservation.matches_search_query("cancha")
    assert reservation.matches_search_query("PARQUE")
    assert reservation.matches_search_query("rojas")
    assert reservation.matches_search_query("ANA@EXAMPLE")
    assert reservation.matches_search_query("torneo")
    assert reservation.matches_search_query("   ")
    assert not reservation.matches_search_query("piscina")


def test_occupied_dates_follow_weekday_mask():
    reservation = make_reservation(
        kind=ReservationKind.RANGE,
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 16),
        weekday_mask=frozenset({1, 3}),
    )

    assert reservation.occupied_dates() == [date(2025, 3, 10), date(2025, 3, 12)]
    assert reservation.last_date == date(2025, 3, 16)


def test_transition_to_returns_new_instance_with_default_id():
    t('tests.unit.test_reservation_entity.test_transition_to_returns_new_instance_with_default_id')
    reservation = make_reservation()

    confirmed = reservation.transition_to(ReservationState.CONFIRMED)

    assert confirmed.state is ReservationState.CONFIRMED
    assert confirmed.state_id == 2
    assert reservation.state is ReservationState.PENDING


def test_transition_from_terminal_state_is_rejected():
    t('tests.unit.test_reservation_entity.test_transition_from_terminal_state_is_rejected')
    reservation = make_reservation(state=ReservationState.CANCELLED, state_id=4)

    with pytest.raises(ReservationDomainError) as excinfo:
        reservation.transition_to(ReservationState.CONFIRMED)

    assert excinfo.value.kind is ErrorKind.VALIDATION
    assert "CANCELADA" in excinfo.value.message


def test_with_changes_updates_editable_fields():
    reservation = make_reservation()
    slot = TimeSlot(id=6, start_time="09:00", end_time="10:00")

    changed = reservation.with_changes(comments="Cambio", timeslots=[slot])

    assert changed.comments == "Cambio"
    assert changed.timeslots == (slot,)
    assert reservation.comments is None

    with pytest.raises(ReservationDomainError):
        make_reservation(state=ReservationState.REJECTED, state_id=3).with_changes(comments="x")


def test_to_wire_uses_remote_field_names():
    t('tests.unit.test_reservation_entity.test_to_wire_uses_remote_field_names')
    payload = make_reservation(comments="Hola").to_wire()

    assert payload["subScenarioId"] == 10
    assert payload["initialDate"] == "2025-03-10"
    assert payload["finalDate"] is None
    assert payload["reservationStateId"] == 1
    assert payload["timeSlotIds"] == [5]


def test_draft_to_wire_includes_weekdays_only_for_ranges():
    t('tests.unit.test_reservation_entity.test_draft_to_wire_includes_weekdays_only_for_ranges')
    single = ReservationDraft(
        facility_unit_id=10,
        timeslot_ids=(5,),
        initial_date=date(2025, 3, 10),
        weekdays=(1,),
    )
    ranged = ReservationDraft(
        facility_unit_id=10,
        timeslot_ids=(5, 6),
        initial_date=date(2025, 3, 10),
        final_date=date(2025, 3, 31),
        weekdays=(3, 1, 1),
        comments="Entrenamiento",
    )

    assert single.kind is ReservationKind.SINGLE
    assert "weekdays" not in single.to_wire()
    assert single.to_wire()["reservationRange"] == {"initialDate": "2025-03-10"}

    wire = ranged.to_wire()
    assert ranged.kind is ReservationKind.RANGE
    assert wire["weekdays"] == [1, 3]
    assert wire["reservationRange"]["finalDate"] == "2025-03-31"
    assert wire["comments"] == "Entrenamiento"


def test_state_from_name_accepts_wire_and_enum_names():
    assert ReservationState.from_name("confirmada") is ReservationState.CONFIRMED
    assert ReservationState.from_name("CANCELLED") is ReservationState.CANCELLED
    with pytest.raises(ValueError):
        ReservationState.from_name("ARCHIVADA")
