"""Boundary adapters turning validated wire payloads into domain objects.

This is the only place where the remote ``reservationState.name`` is mapped
onto :class:`ReservationState`.
"""

from __future__ import annotations
from tracking import t

from typing import Any, Dict, Iterable, Optional, Tuple

import pydantic

from infrastructure import constants
from infrastructure.wire import (
    RESERVATION_PAYLOAD,
    AvailabilityWire,
    PageMetaWire,
    PaymentProofWire,
    ReservationStateOptionWire,
    ReservationWire,
    SubScenarioWire,
    TimeSlotWire,
    UserWire,
)
from reservations.errors import invalid_data_error
from reservations.models.availability import (
    AvailabilityConfiguration,
    AvailabilityStats,
    SimplifiedAvailabilityResult,
    SlotAvailability,
)
from reservations.models.paging import PageMeta
from reservations.models.payment_proof import PaymentProof
from reservations.models.reservation import (
    FacilitySnapshot,
    Reservation,
    ReservationKind,
    ReservationState,
    ScenarioSnapshot,
    TimeSlot,
    UserSnapshot,
)
from reservations.time_utils import normalise_time, parse_iso_date, parse_iso_datetime

_STATE_BY_DEFAULT_ID = {
    state_id: ReservationState(name) for name, state_id in constants.DEFAULT_STATE_IDS.items()
}
ALL_WEEKDAYS = frozenset(constants.WEEKDAY_ORDINALS)


def state_from_wire(name: Optional[str], state_id: Optional[int] = None) -> ReservationState:
    """Map the remote state name (or, failing that, its default id) to a state."""

    t('infrastructure.transformers.state_from_wire')
    if name:
        try:
            return ReservationState.from_name(name)
        except ValueError as exc:
            raise invalid_data_error(f"Unknown reservation state {name!r}", cause=exc) from exc
    if state_id is not None and state_id in _STATE_BY_DEFAULT_ID:
        return _STATE_BY_DEFAULT_ID[state_id]
    return ReservationState.PENDING


def timeslot_from_wire(wire: TimeSlotWire) -> TimeSlot:
    return TimeSlot(
        id=wire.id,
        start_time=normalise_time(wire.start_time),
        end_time=normalise_time(wire.end_time),
    )


def _facility_from_wire(wire: Optional[SubScenarioWire], unit_id: int) -> FacilitySnapshot:
    if wire is None:
        return FacilitySnapshot(id=unit_id)

    scenario: Optional[ScenarioSnapshot] = None
    if wire.scenario is not None:
        neighborhood = wire.scenario.neighborhood
        scenario = ScenarioSnapshot(
            id=wire.scenario.id,
            name=wire.scenario.name,
            address=wire.scenario.address,
            neighborhood_id=neighborhood.id if neighborhood else None,
            neighborhood_name=neighborhood.name if neighborhood else None,
        )
    elif wire.scenario_id is not None:
        scenario = ScenarioSnapshot(id=wire.scenario_id, name=wire.scenario_name or "")

    return FacilitySnapshot(
        id=wire.id or unit_id,
        name=wire.name,
        has_cost=bool(wire.has_cost),
        scenario=scenario,
    )


def _user_from_wire(wire: Optional[UserWire], user_id: int) -> UserSnapshot:
    if wire is None:
        return UserSnapshot(id=user_id)
    return UserSnapshot(
        id=wire.id or user_id,
        first_name=wire.first_name,
        last_name=wire.last_name,
        email=wire.email,
        phone=wire.phone,
    )


def reservation_from_wire(wire: ReservationWire) -> Reservation:
    """Build a :class:`Reservation`, failing fast on malformed records.

    Stray ``finalDate``/``weekDays`` on a SINGLE booking are dropped. A RANGE
    record without weekdays covers every day of its range, so it is given the
    full weekday set.
    """

    t('infrastructure.transformers.reservation_from_wire')

    if wire.id is None or wire.id <= 0:
        raise invalid_data_error(f"Invalid reservation data: missing or invalid id {wire.id!r}")

    unit_id = wire.sub_scenario_id or (wire.sub_scenario.id if wire.sub_scenario else None)
    if not unit_id:
        raise invalid_data_error(f"Reservation {wire.id}: missing facility unit")
    user_id = wire.user_id or (wire.user.id if wire.user else None)
    if not user_id:
        raise invalid_data_error(f"Reservation {wire.id}: missing user")

    try:
        start_date = parse_iso_date(wire.initial_date)
        end_date = parse_iso_date(wire.final_date) if wire.final_date else None
    except ValueError as exc:
        raise invalid_data_error(f"Reservation {wire.id}: unparsable date", cause=exc) from exc

    kind_name = (wire.type or ReservationKind.SINGLE.value).upper()
    try:
        kind = ReservationKind(kind_name)
    except ValueError as exc:
        raise invalid_data_error(f"Reservation {wire.id}: unknown type {wire.type!r}", cause=exc) from exc

    weekday_mask = None
    if kind is ReservationKind.RANGE:
        weekday_mask = frozenset(wire.week_days) if wire.week_days else ALL_WEEKDAYS
    else:
        end_date = None

    state_wire = wire.reservation_state
    state = state_from_wire(
        state_wire.name if state_wire else None,
        wire.reservation_state_id or (state_wire.id if state_wire else None),
    )
    state_id = wire.reservation_state_id or (state_wire.id if state_wire else None) or state.default_id

    if wire.timeslots:
        slots = tuple(timeslot_from_wire(slot) for slot in wire.timeslots)
    elif wire.time_slot is not None:
        slots = (timeslot_from_wire(wire.time_slot),)
    else:
        slots = ()

    return Reservation(
        id=wire.id,
        kind=kind,
        facility_unit_id=unit_id,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        weekday_mask=weekday_mask,
        comments=wire.comments,
        state=state,
        state_id=state_id,
        total_instances=wire.total_instances if wire.total_instances is not None else 1,
        timeslots=slots,
        facility=_facility_from_wire(wire.sub_scenario, unit_id),
        user=_user_from_wire(wire.user, user_id),
        created_at=parse_iso_datetime(wire.created_at),
        updated_at=parse_iso_datetime(wire.updated_at),
    )


def reservations_from_payload(payload: Any) -> Tuple[Reservation, ...]:
    """Normalise a single record or a list of records to a tuple of entities."""

    t('infrastructure.transformers.reservations_from_payload')
    try:
        parsed = RESERVATION_PAYLOAD.validate_python(payload)
    except pydantic.ValidationError as exc:
        raise invalid_data_error("Unexpected reservation payload", cause=exc) from exc
    if isinstance(parsed, list):
        return tuple(reservation_from_wire(item) for item in parsed)
    return (reservation_from_wire(parsed),)


def page_meta_from_wire(
    wire: Optional[PageMetaWire],
    *,
    fallback_limit: int,
    item_count: int,
) -> PageMeta:
    t('infrastructure.transformers.page_meta_from_wire')
    if wire is None:
        return PageMeta(
            page=1,
            limit=fallback_limit,
            total_items=item_count,
            total_pages=1 if item_count else 0,
        )
    return PageMeta(
        page=wire.page,
        limit=wire.limit or fallback_limit,
        total_items=wire.total_items,
        total_pages=wire.total_pages,
    )


def availability_from_wire(
    wire: AvailabilityWire,
    config: Optional[AvailabilityConfiguration] = None,
) -> SimplifiedAvailabilityResult:
    t('infrastructure.transformers.availability_from_wire')
    try:
        dates = tuple(parse_iso_date(value) for value in wire.calculated_dates)
    except ValueError as exc:
        raise invalid_data_error("Availability response has unparsable dates", cause=exc) from exc

    stats = wire.stats
    return SimplifiedAvailabilityResult(
        facility_unit_id=wire.sub_scenario_id,
        calculated_dates=dates,
        time_slots=[
            SlotAvailability(
                id=slot.id,
                start_time=normalise_time(slot.start_time),
                end_time=normalise_time(slot.end_time),
                is_available_across_all_dates=slot.is_available,
            )
            for slot in wire.time_slots
        ],
        stats=AvailabilityStats(
            total_dates=stats.total_dates,
            total_timeslots=stats.total_timeslots,
            total_slots=stats.total_slots,
            available_slots=stats.available_slots,
            occupied_slots=stats.occupied_slots,
            global_availability_percentage=stats.global_availability_percentage,
            dates_with_full_availability=stats.dates_with_full_availability,
            dates_with_no_availability=stats.dates_with_no_availability,
        ),
        queried_at=parse_iso_datetime(wire.queried_at),
        request=config,
    )


def payment_proof_from_wire(wire: PaymentProofWire) -> PaymentProof:
    return PaymentProof(
        id=wire.id,
        reservation_id=wire.reservation_id,
        file_url=wire.file_url,
        original_file_name=wire.original_file_name,
        mime_type=wire.mime_type,
        file_size=wire.file_size,
        uploaded_by=wire.uploaded_by,
        created_at=parse_iso_datetime(wire.created_at),
    )


def state_catalog_from_wire(items: Iterable[ReservationStateOptionWire]) -> Dict[ReservationState, int]:
    """Map each known state to its catalog id; unknown names are skipped."""

    t('infrastructure.transformers.state_catalog_from_wire')
    catalog: Dict[ReservationState, int] = {}
    for item in items:
        try:
            catalog[ReservationState.from_name(item.name)] = item.id
        except ValueError:
            continue
    return catalog
