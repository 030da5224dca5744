"""State machine for reservation lifecycle changes."""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional

from tracking import t

from reservations.errors import ReservationDomainError, ErrorKind
from reservations.models.reservation import ReservationState


ALLOWED_TRANSITIONS: Dict[ReservationState, FrozenSet[ReservationState]] = {
    ReservationState.PENDING: frozenset({
        ReservationState.CONFIRMED,
        ReservationState.REJECTED,
        ReservationState.CANCELLED,
    }),
    ReservationState.CONFIRMED: frozenset({ReservationState.CANCELLED}),
    ReservationState.REJECTED: frozenset(),
    ReservationState.CANCELLED: frozenset(),
}


def can_transition(current: ReservationState, target: ReservationState) -> bool:
    """Return ``True`` when ``current`` may move to ``target``."""

    t('reservations.transitions.can_transition')
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(
    current: ReservationState,
    target: ReservationState,
    *,
    reservation_id: Optional[int] = None,
) -> None:
    """Raise a validation error if ``current`` may not move to ``target``."""

    t('reservations.transitions.ensure_transition')
    if can_transition(current, target):
        return

    subject = f"Reservation {reservation_id}" if reservation_id is not None else "Reservation"
    raise ReservationDomainError(
        f"{subject} cannot change from {current.value} to {target.value}",
        kind=ErrorKind.VALIDATION,
    )
