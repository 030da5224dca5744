"""REST adapter for the ``/reservations`` endpoints."""

from __future__ import annotations
from tracking import t

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from infrastructure import wire
from infrastructure.cache import ResponseCache
from infrastructure.constants import CacheTags
from infrastructure.error_wrapper import CallShape, execute_with_domain_error
from infrastructure.http_client import ApiClient
from infrastructure.settings import AppSettings
from infrastructure.transformers import (
    availability_from_wire,
    page_meta_from_wire,
    reservation_from_wire,
    reservations_from_payload,
    state_catalog_from_wire,
)
from reservations.errors import ErrorKind
from reservations.models.availability import AvailabilityConfiguration, SimplifiedAvailabilityResult
from reservations.models.paging import Page, ReservationFilters
from reservations.models.reservation import Reservation, ReservationDraft, ReservationState, TimeSlot
from reservations.results import Err, Ok, Result
from reservations.search import ReservationSearchCriteria, filter_reservations


def _cache_key(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    if not params:
        return path
    query = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return f"{path}?{query}"


class ReservationRepository:
    """Reads and writes reservations through :class:`ApiClient`.

    Every method returns a ``Result``; transport failures are normalised once,
    here, by :func:`execute_with_domain_error`.
    """

    def __init__(
        self,
        api: ApiClient,
        cache: ResponseCache,
        settings: AppSettings,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('infrastructure.repositories.reservation_repository.ReservationRepository.__init__')
        self.api = api
        self.cache = cache
        self.settings = settings
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def list(self, filters: ReservationFilters) -> Result[Page[Reservation]]:
        """Fetch one page of reservations matching ``filters``."""
        t('infrastructure.repositories.reservation_repository.ReservationRepository.list')

        params = filters.to_query()
        key = _cache_key('/reservations', params)
        cached = self.cache.get(key)
        if cached is not None:
            return Ok(cached)

        async def action() -> Page[Reservation]:
            payload = await self.api.get('/reservations', params=params)
            if not payload:
                return Page.empty(limit=filters.limit)
            envelope = wire.RESERVATION_PAGE.validate_python(payload)
            items = [reservation_from_wire(item) for item in envelope.data]
            meta = page_meta_from_wire(
                envelope.meta,
                fallback_limit=filters.limit,
                item_count=len(items),
            )
            page = Page(data=items, meta=meta)
            self._remember(key, page, self._list_tags(filters, items))
            return page

        return await execute_with_domain_error(
            action, "Error fetching reservations", CallShape.PAGE, log=self.logger
        )

    async def list_for_user(
        self,
        user_id: int,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Result[Page[Reservation]]:
        t('infrastructure.repositories.reservation_repository.ReservationRepository.list_for_user')

        if not isinstance(user_id, int) or user_id <= 0:
            return Err.of(ErrorKind.VALIDATION, f"Invalid user id: {user_id!r}")

        filters = ReservationFilters(
            page=page,
            limit=limit or self.settings.user_page_limit,
            user_id=user_id,
            search=search,
        )
        return await self.list(filters)

    async def get(self, reservation_id: int) -> Result[Optional[Reservation]]:
        """Fetch one reservation; ``Ok(None)`` when it does not exist."""
        t('infrastructure.repositories.reservation_repository.ReservationRepository.get')

        key = _cache_key(f'/reservations/{reservation_id}')
        cached = self.cache.get(key)
        if cached is not None:
            return Ok(cached)

        async def action() -> Optional[Reservation]:
            payload = await self.api.get(f'/reservations/{reservation_id}')
            if not payload:
                return None
            envelope = wire.RESERVATION_SINGLE.validate_python(payload)
            reservation = reservation_from_wire(envelope.data)
            self._remember(key, reservation, [CacheTags.RESERVATIONS, CacheTags.reservation(reservation.id)])
            return reservation

        return await execute_with_domain_error(
            action, f"Error fetching reservation {reservation_id}", CallShape.SINGLE, log=self.logger
        )

    async def search(
        self,
        criteria: ReservationSearchCriteria,
        filters: Optional[ReservationFilters] = None,
        today: Optional[date] = None,
    ) -> Result[List[Reservation]]:
        """Fetch one page and narrow it locally with ``criteria``."""
        t('infrastructure.repositories.reservation_repository.ReservationRepository.search')

        if not criteria.is_valid():
            return Err.of(ErrorKind.VALIDATION, criteria.validation_message())

        filters = filters or ReservationFilters(
            limit=self.settings.default_page_limit,
            search=criteria.search_query,
            user_id=criteria.user_id,
            sub_scenario_id=criteria.facility_unit_id,
            scenario_id=criteria.scenario_id,
            date_from=criteria.date_from,
            date_to=criteria.date_to,
        )
        page = await self.list(filters)
        return page.map(lambda found: filter_reservations(found.data, criteria, today))

    async def states(self) -> Result[Dict[ReservationState, int]]:
        """Return the state catalog (state -> id), cached for an hour."""
        t('infrastructure.repositories.reservation_repository.ReservationRepository.states')

        key = _cache_key('/reservations/states')
        cached = self.cache.get(key)
        if cached is not None:
            return Ok(cached)

        async def action() -> Dict[ReservationState, int]:
            payload = await self.api.get('/reservations/states')
            envelope = wire.RESERVATION_STATES.validate_python(payload)
            return state_catalog_from_wire(envelope.data)

        result = await execute_with_domain_error(
            action, "Error fetching reservation states", CallShape.LIST, log=self.logger
        )
        if result.ok and result.value:
            self.cache.set(
                key,
                result.value,
                self.settings.states_cache_seconds,
                tags=[CacheTags.RESERVATION_STATES],
            )
        return result

    async def get_availability(
        self,
        config: AvailabilityConfiguration,
    ) -> Result[Optional[SimplifiedAvailabilityResult]]:
        """Query availability for ``config``; cached per configuration."""
        t('infrastructure.repositories.reservation_repository.ReservationRepository.get_availability')

        params = config.to_query()
        key = _cache_key('/reservations/availability', params)
        cached = self.cache.get(key)
        if cached is not None:
            return Ok(cached)

        async def action() -> Optional[SimplifiedAvailabilityResult]:
            payload = await self.api.get('/reservations/availability', params=params)
            if not payload:
                return None
            envelope = wire.AVAILABILITY.validate_python(payload)
            return availability_from_wire(envelope.data, config)

        result = await execute_with_domain_error(
            action,
            f"Error fetching availability for unit {config.facility_unit_id}",
            CallShape.SINGLE,
            log=self.logger,
        )
        if result.ok and result.value is not None:
            self.cache.set(
                key,
                result.value,
                self.settings.availability_cache_seconds,
                tags=[
                    CacheTags.AVAILABILITY,
                    CacheTags.availability(config.facility_unit_id),
                    CacheTags.timeslots(config.facility_unit_id),
                    *(CacheTags.timeslots(config.facility_unit_id, day) for day in result.value.calculated_dates),
                ],
            )
        return result

    async def available_timeslots(self, facility_unit_id: int, day: date) -> Result[List[TimeSlot]]:
        """Slots still free on ``day``, derived from a single-date availability query."""
        t('infrastructure.repositories.reservation_repository.ReservationRepository.available_timeslots')

        result = await self.get_availability(
            AvailabilityConfiguration(facility_unit_id=facility_unit_id, initial_date=day)
        )
        if not result.ok:
            return result
        if result.value is None:
            return Ok([])
        return Ok([
            TimeSlot(id=slot.id, start_time=slot.start_time, end_time=slot.end_time)
            for slot in result.value.time_slots
            if slot.is_available_across_all_dates
        ])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def create(self, draft: ReservationDraft) -> Result[int]:
        """Submit a booking request; returns the new reservation id."""
        t('infrastructure.repositories.reservation_repository.ReservationRepository.create')

        async def action() -> int:
            payload = await self.api.post('/reservations', json=draft.to_wire())
            envelope = wire.CREATED_RESERVATION.validate_python(payload)
            return envelope.data.id

        return await execute_with_domain_error(
            action, "Error creating reservation", CallShape.COMMAND, log=self.logger
        )

    async def update(self, reservation: Reservation) -> Result[Reservation]:
        t('infrastructure.repositories.reservation_repository.ReservationRepository.update')

        async def action() -> Reservation:
            payload = await self.api.put(f'/reservations/{reservation.id}', json=reservation.to_wire())
            return reservations_from_payload(wire.unwrap_data(payload))[0]

        return await execute_with_domain_error(
            action, f"Error updating reservation {reservation.id}", CallShape.COMMAND, log=self.logger
        )

    async def update_state(
        self,
        reservation_id: int,
        state_id: int,
        justification: Optional[str] = None,
    ) -> Result[Reservation]:
        t('infrastructure.repositories.reservation_repository.ReservationRepository.update_state')

        body: Dict[str, Any] = {'reservationStateId': state_id}
        if justification:
            body['justification'] = justification

        async def action() -> Reservation:
            payload = await self.api.patch(f'/reservations/{reservation_id}/state', json=body)
            return reservations_from_payload(wire.unwrap_data(payload))[0]

        return await execute_with_domain_error(
            action,
            f"Error updating state of reservation {reservation_id}",
            CallShape.COMMAND,
            log=self.logger,
        )

    async def update_states(
        self,
        primary_id: int,
        additional_ids: Iterable[int],
        state_id: int,
    ) -> Result[Tuple[Reservation, ...]]:
        """One ``PATCH`` applying ``state_id`` to the primary and additional ids.

        The response may be a single record or a list; both become a tuple.
        """
        t('infrastructure.repositories.reservation_repository.ReservationRepository.update_states')

        extra = list(additional_ids)
        body: Dict[str, Any] = {'reservationStateId': state_id}
        if extra:
            body['additionalReservationIds'] = extra

        self.logger.info(
            "Updating reservation states - primary: %s, additional: %s, state: %s",
            primary_id,
            ", ".join(str(rid) for rid in extra) or "none",
            state_id,
        )

        async def action() -> Tuple[Reservation, ...]:
            payload = await self.api.patch(f'/reservations/{primary_id}/state', json=body)
            data = wire.unwrap_data(payload)
            if data is None:
                return ()
            return reservations_from_payload(data)

        return await execute_with_domain_error(
            action, "Error updating reservations", CallShape.COMMAND, log=self.logger
        )

    async def delete(self, reservation_id: int) -> Result[None]:
        t('infrastructure.repositories.reservation_repository.ReservationRepository.delete')

        async def action() -> None:
            await self.api.delete(f'/reservations/{reservation_id}')
            return None

        return await execute_with_domain_error(
            action, f"Error deleting reservation {reservation_id}", CallShape.COMMAND, log=self.logger
        )

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------
    def invalidate(self, tags: Iterable[str]) -> int:
        t('infrastructure.repositories.reservation_repository.ReservationRepository.invalidate')
        return self.cache.invalidate_tags(tags)

    def _remember(self, key: str, value: Any, tags: Iterable[str]) -> None:
        self.cache.set(key, value, self.settings.reservations_cache_seconds, tags=tags)

    @staticmethod
    def _list_tags(filters: ReservationFilters, items: Iterable[Reservation]) -> List[str]:
        """Tags for a cached page: the global list, its user and unit, and every record in it."""
        tags = [CacheTags.RESERVATIONS]
        if filters.user_id is not None:
            tags.append(CacheTags.user_reservations(filters.user_id))
        if filters.sub_scenario_id is not None:
            tags.append(CacheTags.scenario_reservations(filters.sub_scenario_id))
        tags.extend(CacheTags.reservation(reservation.id) for reservation in items)
        return tags
