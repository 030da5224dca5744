"""Apply one target state to several reservations in a single remote call."""

from __future__ import annotations
from tracking import t

import logging
from typing import Iterable, List, Optional, Sequence, Set

from infrastructure.constants import CacheTags
from reservations.errors import ReservationDomainError
from reservations.models.bulk import BulkItemError, BulkUpdateResult
from reservations.models.reservation import Reservation
from reservations.results import Err, Ok, Result
from reservations.validation import validate_id, validate_ids


class BulkStateTransitionCoordinator:
    """Send ``PATCH /reservations/{primary}/state`` for a group of ids.

    There is no automatic retry. A transport failure yields an aggregate
    with ``success=False``; a success that covers fewer records than were
    requested is reported through ``missing_ids`` rather than hidden.
    """

    def __init__(self, repository, logger: Optional[logging.Logger] = None) -> None:
        t('reservations.services.bulk_transition.BulkStateTransitionCoordinator.__init__')
        self.repository = repository
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def apply(
        self,
        primary_id: int,
        additional_ids: Sequence[int],
        target_state_id: int,
        affected: Sequence[Reservation] = (),
    ) -> Result[BulkUpdateResult]:
        """Apply ``target_state_id`` to ``primary_id`` and ``additional_ids``.

        Args:
            affected: Entities already loaded for the requested ids. Their
                owner, unit and date tags are invalidated even when the
                remote answers with fewer records.

        Returns:
            ``Err(VALIDATION)`` for non-positive ids (no remote call), else
            ``Ok`` with the aggregate outcome, including remote failures.
        """

        t('reservations.services.bulk_transition.BulkStateTransitionCoordinator.apply')

        try:
            validate_id(primary_id)
            extra = [rid for rid in validate_ids(additional_ids) if rid != primary_id]
            validate_id(target_state_id, "state id")
        except ReservationDomainError as exc:
            return Err(exc)

        # Keep request order, drop duplicates.
        extra = list(dict.fromkeys(extra))
        requested = (primary_id, *extra)

        result = await self.repository.update_states(primary_id, extra, target_state_id)
        if not result.ok:
            self.logger.error(
                "Bulk state change to %s failed for %s: %s",
                target_state_id,
                list(requested),
                result.message,
            )
            return Ok(BulkUpdateResult(
                success=False,
                updated_count=0,
                errors=(BulkItemError(reservation_id=primary_id, error=result.message),),
                requested_ids=requested,
                message=result.message,
            ))

        updated = tuple(result.value)
        outcome = BulkUpdateResult(
            success=True,
            updated_count=len(updated),
            updated=updated,
            requested_ids=requested,
            message=self._message(len(updated), len(requested)),
        )
        if outcome.missing_ids:
            self.logger.warning(
                "Bulk state change to %s applied %d of %d reservations; missing %s",
                target_state_id,
                outcome.updated_count,
                len(requested),
                list(outcome.missing_ids),
            )
        else:
            self.logger.info(
                "Bulk state change to %s applied to %d reservations", target_state_id, len(updated)
            )

        self.repository.invalidate(self.invalidation_tags(requested, (*affected, *updated)))
        return Ok(outcome)

    @staticmethod
    def invalidation_tags(
        requested_ids: Iterable[int],
        updated: Iterable[Reservation],
    ) -> List[str]:
        """Every cache tag a state change on these reservations may have staled."""

        t('reservations.services.bulk_transition.BulkStateTransitionCoordinator.invalidation_tags')

        tags: Set[str] = {CacheTags.RESERVATIONS, CacheTags.TIMESLOTS, CacheTags.AVAILABILITY}
        tags.update(CacheTags.reservation(rid) for rid in requested_ids)
        for reservation in updated:
            tags.update(reservation_tags(reservation))
        return sorted(tags)

    @staticmethod
    def _message(updated: int, requested: int) -> str:
        if updated == requested:
            return f"{updated} reservations updated"
        return f"{updated} of {requested} reservations updated"


def reservation_tags(reservation: Reservation) -> List[str]:
    """Tags covering one reservation, its owner, its unit and its dates."""

    t('reservations.services.bulk_transition.reservation_tags')
    unit = reservation.facility_unit_id
    tags = [
        CacheTags.reservation(reservation.id),
        CacheTags.user_reservations(reservation.user_id),
        CacheTags.scenario_reservations(unit),
        CacheTags.timeslots(unit),
        CacheTags.availability(unit),
    ]
    tags.extend(CacheTags.timeslots(unit, day) for day in reservation.occupied_dates())
    return tags
