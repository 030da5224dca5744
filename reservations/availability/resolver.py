"""Resolve which time slots are free for an availability configuration."""

from __future__ import annotations
from tracking import t

import logging
from typing import Iterable, List, Optional, Protocol

from reservations.availability.expansion import expand_dates
from reservations.errors import ErrorKind, ReservationDomainError
from reservations.models.availability import AvailabilityConfiguration, SimplifiedAvailabilityResult
from reservations.results import Err, Ok, Result
from reservations.validation import validate_configuration


class AvailabilitySource(Protocol):
    async def get_availability(
        self, config: AvailabilityConfiguration
    ) -> Result[Optional[SimplifiedAvailabilityResult]]:
        ...


class AvailabilityResolver:
    """Validate a configuration locally, then ask the remote service.

    The remote answer is authoritative and only advisory for submission: a
    slot reported free can still be taken before the booking is sent.
    """

    def __init__(self, source: AvailabilitySource, logger: Optional[logging.Logger] = None) -> None:
        t('reservations.availability.resolver.AvailabilityResolver.__init__')
        self._source = source
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def resolve(self, config: AvailabilityConfiguration) -> Result[SimplifiedAvailabilityResult]:
        t('reservations.availability.resolver.AvailabilityResolver.resolve')

        try:
            validate_configuration(config)
        except ReservationDomainError as exc:
            self.logger.info(
                "Rejected availability query for unit %s: %s", config.facility_unit_id, exc.message
            )
            return Err(exc)

        result = await self._source.get_availability(config)
        if not result.ok:
            self.logger.warning(
                "Availability lookup failed for unit %s (%s): %s",
                config.facility_unit_id,
                result.kind.value,
                result.message,
            )
            return result
        if result.value is None:
            return Err.of(
                ErrorKind.NOT_FOUND,
                f"No availability returned for facility unit {config.facility_unit_id}",
            )

        self._cross_check(config, result.value)
        return Ok(result.value)

    def unavailable_slots(
        self,
        result: SimplifiedAvailabilityResult,
        timeslot_ids: Iterable[int],
    ) -> List[int]:
        """Return the selected slot ids that are not free on every date."""

        t('reservations.availability.resolver.AvailabilityResolver.unavailable_slots')
        available = set(result.available_slot_ids())
        return [slot_id for slot_id in timeslot_ids if slot_id not in available]

    def _cross_check(
        self,
        config: AvailabilityConfiguration,
        result: SimplifiedAvailabilityResult,
    ) -> None:
        t('reservations.availability.resolver.AvailabilityResolver._cross_check')
        expected = tuple(expand_dates(config.initial_date, config.final_date, config.weekdays))
        if not result.calculated_dates or expected == result.calculated_dates:
            return
        self.logger.warning(
            "Remote dates differ from local expansion for unit %s: local=%d remote=%d",
            config.facility_unit_id,
            len(expected),
            len(result.calculated_dates),
        )
