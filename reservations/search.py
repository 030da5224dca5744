"""In-memory filtering of reservation lists."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from tracking import t

from reservations.models.reservation import Reservation, ReservationState


@dataclass(frozen=True)
class ReservationSearchCriteria:
    """Optional predicates; unset fields do not filter."""

    search_query: Optional[str] = None
    user_id: Optional[int] = None
    facility_unit_id: Optional[int] = None
    scenario_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    state: Optional[ReservationState] = None
    active: Optional[bool] = None
    limit: Optional[int] = None

    def is_valid(self) -> bool:
        t('reservations.search.ReservationSearchCriteria.is_valid')
        if self.limit is not None and self.limit <= 0:
            return False
        if self.date_from is not None and self.date_to is not None:
            return self.date_from <= self.date_to
        return True

    def validation_message(self) -> str:
        if self.limit is not None and self.limit <= 0:
            return f"Search limit must be positive, got {self.limit}"
        return "Search start date must not be after end date"


def _overlaps(reservation: Reservation, date_from: Optional[date], date_to: Optional[date]) -> bool:
    if date_from is not None and reservation.last_date < date_from:
        return False
    if date_to is not None and reservation.start_date > date_to:
        return False
    return True


def _scenario_id(reservation: Reservation) -> Optional[int]:
    if reservation.facility and reservation.facility.scenario:
        return reservation.facility.scenario.id
    return None


def filter_reservations(
    reservations: Iterable[Reservation],
    criteria: ReservationSearchCriteria,
    today: Optional[date] = None,
) -> List[Reservation]:
    """Apply ``criteria`` keeping input order, then truncate to ``limit``.

    The date filter keeps a reservation when its span
    ``[start_date, end_date or start_date]`` overlaps ``[date_from, date_to]``.
    """

    t('reservations.search.filter_reservations')

    matched: List[Reservation] = []
    for reservation in reservations:
        if criteria.search_query and not reservation.matches_search_query(criteria.search_query):
            continue
        if criteria.user_id is not None and not reservation.belongs_to_user(criteria.user_id):
            continue
        if (
            criteria.facility_unit_id is not None
            and not reservation.belongs_to_facility_unit(criteria.facility_unit_id)
        ):
            continue
        if criteria.scenario_id is not None and _scenario_id(reservation) != criteria.scenario_id:
            continue
        if not _overlaps(reservation, criteria.date_from, criteria.date_to):
            continue
        if criteria.state is not None and reservation.state is not criteria.state:
            continue
        if criteria.active is not None and reservation.is_active(today) != criteria.active:
            continue
        matched.append(reservation)

    if criteria.limit is not None:
        return matched[:criteria.limit]
    return matched
