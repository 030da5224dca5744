"""Reservation entity and the value objects it carries."""

from __future__ import annotations
from tracking import t

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from infrastructure import constants
from reservations.availability.expansion import expand_dates
from reservations.errors import ErrorKind, ReservationDomainError, invalid_data_error


class ReservationKind(Enum):
    """Single-date booking or recurring pattern."""

    SINGLE = "SINGLE"
    RANGE = "RANGE"


class ReservationState(Enum):
    """Lifecycle states; values are the names used by the remote service."""

    PENDING = constants.STATE_NAME_PENDING
    CONFIRMED = constants.STATE_NAME_CONFIRMED
    REJECTED = constants.STATE_NAME_REJECTED
    CANCELLED = constants.STATE_NAME_CANCELLED

    @property
    def default_id(self) -> int:
        return constants.DEFAULT_STATE_IDS[self.value]

    @classmethod
    def from_name(cls, name: str) -> "ReservationState":
        normalised = (name or "").strip().upper()
        for state in cls:
            if state.value == normalised or state.name == normalised:
                return state
        raise ValueError(f"Unknown reservation state: {name!r}")


TERMINAL_STATES = frozenset({ReservationState.CANCELLED, ReservationState.REJECTED})
MODIFIABLE_STATES = frozenset({ReservationState.PENDING, ReservationState.CONFIRMED})


@dataclass(frozen=True)
class TimeSlot:
    """Time-of-day window offered for booking."""

    id: int
    start_time: str
    end_time: str

    def __str__(self) -> str:
        return f"{self.start_time} - {self.end_time}"


@dataclass(frozen=True)
class ScenarioSnapshot:
    """Read-only copy of the facility (scenario) a unit belongs to."""

    id: int
    name: str
    address: Optional[str] = None
    neighborhood_id: Optional[int] = None
    neighborhood_name: Optional[str] = None


@dataclass(frozen=True)
class FacilitySnapshot:
    """Display copy of the reserved facility unit; ``facility_unit_id`` is authoritative."""

    id: int
    name: str = ""
    has_cost: bool = False
    scenario: Optional[ScenarioSnapshot] = None

    @property
    def scenario_name(self) -> str:
        return self.scenario.name if self.scenario else ""


@dataclass(frozen=True)
class UserSnapshot:
    """Display copy of the requester; ``user_id`` is authoritative."""

    id: int
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Reservation:
    """Immutable booking with its invariants and state queries."""

    id: int
    kind: ReservationKind
    facility_unit_id: int
    user_id: int
    start_date: date
    state: ReservationState
    state_id: int
    end_date: Optional[date] = None
    weekday_mask: Optional[FrozenSet[int]] = None
    comments: Optional[str] = None
    total_instances: int = 1
    timeslots: Tuple[TimeSlot, ...] = field(default_factory=tuple)
    facility: Optional[FacilitySnapshot] = None
    user: Optional[UserSnapshot] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        t('reservations.models.reservation.Reservation.__post_init__')

        if not isinstance(self.id, int) or self.id <= 0:
            raise invalid_data_error(f"Invalid reservation data: missing or invalid id {self.id!r}")
        if not isinstance(self.start_date, date):
            raise invalid_data_error(f"Reservation {self.id}: start date is required")
        if self.total_instances < 1:
            raise invalid_data_error(
                f"Reservation {self.id}: total instances must be at least 1, got {self.total_instances}"
            )

        if self.kind is ReservationKind.RANGE:
            if self.end_date is None:
                raise invalid_data_error(f"Reservation {self.id}: RANGE booking without end date")
            if self.end_date < self.start_date:
                raise invalid_data_error(f"Reservation {self.id}: end date before start date")
            if not self.weekday_mask:
                raise invalid_data_error(f"Reservation {self.id}: RANGE booking without weekdays")
            if any(day not in constants.WEEKDAY_ORDINALS for day in self.weekday_mask):
                raise invalid_data_error(
                    f"Reservation {self.id}: weekday ordinals must be within 0-6"
                )
        elif self.end_date is not None or self.weekday_mask is not None:
            raise invalid_data_error(
                f"Reservation {self.id}: end date and weekdays only apply to RANGE bookings"
            )

        if self.weekday_mask is not None and not isinstance(self.weekday_mask, frozenset):
            object.__setattr__(self, 'weekday_mask', frozenset(self.weekday_mask))
        if not isinstance(self.timeslots, tuple):
            object.__setattr__(self, 'timeslots', tuple(self.timeslots))

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------
    def is_active(self, today: Optional[date] = None) -> bool:
        t('reservations.models.reservation.Reservation.is_active')
        if self.state in TERMINAL_STATES:
            return False
        if today is None:
            from reservations.time_utils import local_today

            today = local_today()
        return self.start_date >= today

    def is_pending(self) -> bool:
        return self.state is ReservationState.PENDING

    def is_confirmed(self) -> bool:
        return self.state is ReservationState.CONFIRMED

    def is_cancelled(self) -> bool:
        return self.state is ReservationState.CANCELLED

    def is_rejected(self) -> bool:
        return self.state is ReservationState.REJECTED

    def can_be_modified(self, today: Optional[date] = None) -> bool:
        t('reservations.models.reservation.Reservation.can_be_modified')
        return self.is_active(today) and self.state in MODIFIABLE_STATES

    def belongs_to_user(self, user_id: int) -> bool:
        return self.user_id == user_id

    def belongs_to_facility_unit(self, facility_unit_id: int) -> bool:
        return self.facility_unit_id == facility_unit_id

    def matches_search_query(self, query: Optional[str]) -> bool:
        """Case-insensitive substring match over the display fields."""

        t('reservations.models.reservation.Reservation.matches_search_query')
        if not query or not query.strip():
            return True

        needle = query.strip().lower()
        haystack = [
            self.facility.name if self.facility else "",
            self.facility.scenario_name if self.facility else "",
            self.user.first_name if self.user else "",
            self.user.last_name if self.user else "",
            self.user.email if self.user else "",
            self.comments or "",
        ]
        return any(needle in value.lower() for value in haystack if value)

    @property
    def user_full_name(self) -> str:
        return self.user.full_name if self.user else ""

    @property
    def has_cost(self) -> bool:
        return bool(self.facility and self.facility.has_cost)

    @property
    def last_date(self) -> date:
        return self.end_date or self.start_date

    def occupied_dates(self) -> List[date]:
        """Dates this booking occupies under the shared expansion rule."""

        t('reservations.models.reservation.Reservation.occupied_dates')
        return expand_dates(self.start_date, self.end_date, self.weekday_mask)

    # ------------------------------------------------------------------
    # Explicit mutations (return new instances)
    # ------------------------------------------------------------------
    def transition_to(self, target: ReservationState, state_id: Optional[int] = None) -> "Reservation":
        """Return a copy in ``target`` state, rejecting illegal transitions."""

        t('reservations.models.reservation.Reservation.transition_to')
        from reservations.transitions import ensure_transition

        ensure_transition(self.state, target, reservation_id=self.id)
        return replace(
            self,
            state=target,
            state_id=state_id if state_id is not None else target.default_id,
        )

    def with_changes(
        self,
        *,
        comments: Optional[str] = None,
        timeslots: Optional[Iterable[TimeSlot]] = None,
    ) -> "Reservation":
        """Return a copy with editable fields updated."""

        t('reservations.models.reservation.Reservation.with_changes')
        if self.state in TERMINAL_STATES:
            raise ReservationDomainError(
                f"Reservation {self.id} is {self.state.value} and can no longer be edited",
                kind=ErrorKind.VALIDATION,
            )
        changes: Dict[str, Any] = {}
        if comments is not None:
            changes['comments'] = comments
        if timeslots is not None:
            changes['timeslots'] = tuple(timeslots)
        return replace(self, **changes)

    def to_wire(self) -> Dict[str, Any]:
        """Serialise the editable fields in the remote service's format."""

        t('reservations.models.reservation.Reservation.to_wire')
        payload: Dict[str, Any] = {
            'id': self.id,
            'type': self.kind.value,
            'subScenarioId': self.facility_unit_id,
            'userId': self.user_id,
            'initialDate': self.start_date.isoformat(),
            'finalDate': self.end_date.isoformat() if self.end_date else None,
            'weekDays': sorted(self.weekday_mask) if self.weekday_mask else None,
            'comments': self.comments,
            'reservationStateId': self.state_id,
            'totalInstances': self.total_instances,
            'timeSlotIds': [slot.id for slot in self.timeslots],
        }
        return payload


@dataclass(frozen=True)
class ReservationDraft:
    """Booking request assembled before submission."""

    facility_unit_id: int
    timeslot_ids: Tuple[int, ...]
    initial_date: date
    final_date: Optional[date] = None
    weekdays: Optional[Tuple[int, ...]] = None
    comments: Optional[str] = None

    @property
    def kind(self) -> ReservationKind:
        return ReservationKind.RANGE if self.final_date is not None else ReservationKind.SINGLE

    def to_wire(self) -> Dict[str, Any]:
        t('reservations.models.reservation.ReservationDraft.to_wire')
        reservation_range: Dict[str, Any] = {'initialDate': self.initial_date.isoformat()}
        if self.final_date is not None:
            reservation_range['finalDate'] = self.final_date.isoformat()

        payload: Dict[str, Any] = {
            'subScenarioId': self.facility_unit_id,
            'timeSlotIds': list(self.timeslot_ids),
            'reservationRange': reservation_range,
        }
        if self.kind is ReservationKind.RANGE and self.weekdays:
            payload['weekdays'] = sorted(set(self.weekdays))
        if self.comments:
            payload['comments'] = self.comments
        return payload
