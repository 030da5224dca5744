"""Domain service for creating, editing and transitioning reservations."""

from __future__ import annotations
from tracking import t

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

from infrastructure.constants import CacheTags
from infrastructure.settings import AppSettings
from reservations.availability.expansion import expand_dates
from reservations.errors import ErrorKind, ReservationDomainError
from reservations.models.availability import SimplifiedAvailabilityResult
from reservations.models.bulk import BulkItemError, BulkUpdateResult
from reservations.models.paging import Page, ReservationFilters
from reservations.models.reservation import (
    Reservation,
    ReservationDraft,
    ReservationState,
    TimeSlot,
)
from reservations.results import Err, Ok, Result
from reservations.search import ReservationSearchCriteria
from reservations.services.bulk_transition import BulkStateTransitionCoordinator, reservation_tags
from reservations.time_utils import local_now
from reservations.transitions import can_transition
from reservations.validation import validate_draft, validate_id


class ReservationService:
    """High-level API for reservation reads and commands."""

    def __init__(
        self,
        repository,
        coordinator: BulkStateTransitionCoordinator,
        settings: AppSettings,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('reservations.services.reservation_service.ReservationService.__init__')
        self.repository = repository
        self.coordinator = coordinator
        self.settings = settings
        self._clock = clock or (lambda: local_now(settings.timezone))
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get(self, reservation_id: int) -> Result[Optional[Reservation]]:
        t('reservations.services.reservation_service.ReservationService.get')
        try:
            validate_id(reservation_id)
        except ReservationDomainError as exc:
            return Err(exc)
        return await self.repository.get(reservation_id)

    async def list(self, filters: Optional[ReservationFilters] = None) -> Result[Page[Reservation]]:
        t('reservations.services.reservation_service.ReservationService.list')
        return await self.repository.list(
            filters or ReservationFilters(limit=self.settings.default_page_limit)
        )

    async def list_for_user(
        self,
        user_id: int,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Result[Page[Reservation]]:
        """Reservations of one user; the page size defaults to the user view limit."""
        t('reservations.services.reservation_service.ReservationService.list_for_user')
        return await self.repository.list_for_user(
            user_id,
            page=page,
            limit=limit or self.settings.user_page_limit,
            search=search,
        )

    async def search(
        self,
        criteria: ReservationSearchCriteria,
    ) -> Result[List[Reservation]]:
        t('reservations.services.reservation_service.ReservationService.search')
        return await self.repository.search(criteria, today=self._clock().date())

    async def states(self) -> Result[Dict[ReservationState, int]]:
        t('reservations.services.reservation_service.ReservationService.states')
        return await self.repository.states()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def create(
        self,
        draft: ReservationDraft,
        *,
        user_id: Optional[int] = None,
        timeslots: Optional[Sequence[TimeSlot]] = None,
        availability: Optional[SimplifiedAvailabilityResult] = None,
    ) -> Result[int]:
        """Validate and submit a booking request.

        Args:
            draft: The booking request.
            user_id: Requester, used to invalidate their cached lists.
            timeslots: Slot catalogue of the unit, enables the past-slot check.
            availability: Advisory availability checked before submission.

        Returns:
            ``Ok(reservation_id)`` or an ``Err``; a remote conflict carries the
            enumerated (date, slot) pairs.
        """

        t('reservations.services.reservation_service.ReservationService.create')

        try:
            validate_draft(draft, now=self._clock(), timeslots=timeslots, availability=availability)
        except ReservationDomainError as exc:
            self.logger.info("Booking request rejected locally: %s", exc.message)
            return Err(exc)

        result = await self.repository.create(draft)
        if not result.ok:
            if result.kind is ErrorKind.CONFLICT:
                self.logger.warning(
                    "Booking for unit %s conflicted on %d slot(s)",
                    draft.facility_unit_id,
                    len(result.conflicts),
                )
            return result

        self.logger.info(
            "Created reservation %s for unit %s (%s)",
            result.value,
            draft.facility_unit_id,
            draft.kind.value,
        )
        self.repository.invalidate(self._draft_tags(draft, user_id))
        return result

    async def update(
        self,
        reservation: Reservation,
        *,
        comments: Optional[str] = None,
        timeslots: Optional[Iterable[TimeSlot]] = None,
    ) -> Result[Reservation]:
        t('reservations.services.reservation_service.ReservationService.update')

        if not reservation.can_be_modified(self._clock().date()):
            return Err.of(
                ErrorKind.VALIDATION,
                f"Reservation {reservation.id} can no longer be modified",
            )
        try:
            changed = reservation.with_changes(comments=comments, timeslots=timeslots)
        except ReservationDomainError as exc:
            return Err(exc)

        result = await self.repository.update(changed)
        if result.ok:
            tags = set(reservation_tags(reservation))
            tags.update({CacheTags.RESERVATIONS, CacheTags.TIMESLOTS, CacheTags.AVAILABILITY})
            self.repository.invalidate(sorted(tags))
        return result

    async def transition(
        self,
        reservation: Reservation,
        target: ReservationState,
        justification: Optional[str] = None,
    ) -> Result[Reservation]:
        """Move one reservation to ``target`` after checking the state machine."""

        t('reservations.services.reservation_service.ReservationService.transition')

        try:
            reservation.transition_to(target)
        except ReservationDomainError as exc:
            return Err(exc)

        state_id = await self.state_id(target)
        result = await self.repository.update_state(reservation.id, state_id, justification)
        if result.ok:
            self.logger.info(
                "Reservation %s moved from %s to %s",
                reservation.id,
                reservation.state.value,
                target.value,
            )
            tags = set(reservation_tags(reservation))
            tags.update({CacheTags.RESERVATIONS, CacheTags.TIMESLOTS, CacheTags.AVAILABILITY})
            self.repository.invalidate(sorted(tags))
        return result

    async def change_states(
        self,
        reservations: Sequence[Reservation],
        target: ReservationState,
    ) -> Result[BulkUpdateResult]:
        """Bulk transition; illegal transitions are reported per item and never sent."""

        t('reservations.services.reservation_service.ReservationService.change_states')

        if not reservations:
            return Err.of(ErrorKind.VALIDATION, "Select at least one reservation")

        legal: List[Reservation] = []
        rejected: List[BulkItemError] = []
        for reservation in reservations:
            if can_transition(reservation.state, target):
                legal.append(reservation)
            else:
                rejected.append(BulkItemError(
                    reservation_id=reservation.id,
                    error=f"Cannot change from {reservation.state.value} to {target.value}",
                ))

        requested = tuple(reservation.id for reservation in reservations)
        if not legal:
            return Ok(BulkUpdateResult(
                success=False,
                updated_count=0,
                errors=tuple(rejected),
                requested_ids=requested,
                message="No reservation can make this change",
            ))

        state_id = await self.state_id(target)
        result = await self.coordinator.apply(
            legal[0].id,
            [reservation.id for reservation in legal[1:]],
            state_id,
            affected=legal,
        )
        if not result.ok or not rejected:
            return result

        outcome = result.value
        return Ok(replace(
            outcome,
            errors=tuple(rejected) + outcome.errors,
            requested_ids=requested,
        ))

    async def delete(
        self,
        reservation_id: int,
        reservation: Optional[Reservation] = None,
    ) -> Result[None]:
        """Ask the remote owner to delete a reservation; the local copy is discarded.

        Passing the loaded ``reservation`` lets the unit and user caches be
        invalidated too.
        """
        t('reservations.services.reservation_service.ReservationService.delete')

        try:
            validate_id(reservation_id)
        except ReservationDomainError as exc:
            return Err(exc)

        result = await self.repository.delete(reservation_id)
        if result.ok:
            self.logger.info("Deleted reservation %s", reservation_id)
            tags = {
                CacheTags.RESERVATIONS,
                CacheTags.TIMESLOTS,
                CacheTags.AVAILABILITY,
                CacheTags.reservation(reservation_id),
            }
            if reservation is not None:
                tags.update(reservation_tags(reservation))
            self.repository.invalidate(sorted(tags))
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def state_id(self, state: ReservationState) -> int:
        """Catalog id for ``state``; the well-known default when the catalog is unavailable."""
        t('reservations.services.reservation_service.ReservationService.state_id')

        catalog = await self.repository.states()
        if catalog.ok and state in catalog.value:
            return catalog.value[state]
        if not catalog.ok:
            self.logger.warning(
                "State catalog unavailable (%s); using default id for %s",
                catalog.message,
                state.value,
            )
        return state.default_id

    @staticmethod
    def _draft_tags(draft: ReservationDraft, user_id: Optional[int]) -> List[str]:
        unit = draft.facility_unit_id
        tags: Set[str] = {
            CacheTags.RESERVATIONS,
            CacheTags.TIMESLOTS,
            CacheTags.AVAILABILITY,
            CacheTags.scenario_reservations(unit),
            CacheTags.timeslots(unit),
            CacheTags.availability(unit),
        }
        dates: List[date] = expand_dates(draft.initial_date, draft.final_date, draft.weekdays)
        tags.update(CacheTags.timeslots(unit, day) for day in dates)
        if user_id is not None:
            tags.add(CacheTags.user_reservations(user_id))
        return sorted(tags)
