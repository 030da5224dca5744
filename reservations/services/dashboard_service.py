"""Composite read backing the staff reservation dashboard."""

from __future__ import annotations
from tracking import t

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, List, Optional

from infrastructure.settings import AppSettings
from reservations.models.catalog import CatalogItem
from reservations.models.paging import Page, ReservationFilters
from reservations.models.reservation import Reservation, ReservationState
from reservations.results import Ok, Result, first_error
from reservations.time_utils import local_now


@dataclass(frozen=True)
class DashboardStats:
    total: int = 0
    today: int = 0
    confirmed: int = 0
    pending: int = 0
    rejected: int = 0
    cancelled: int = 0


@dataclass(frozen=True)
class DashboardData:
    reservations: Page[Reservation] = field(default_factory=Page.empty)
    facility_units: List[CatalogItem] = field(default_factory=list)
    neighborhoods: List[CatalogItem] = field(default_factory=list)
    stats: DashboardStats = field(default_factory=DashboardStats)


def compute_stats(page: Page[Reservation], today: date) -> DashboardStats:
    """Counters over the page; ``total`` is the remote total across pages."""

    t('reservations.services.dashboard_service.compute_stats')
    items = page.data

    def count(state: ReservationState) -> int:
        return sum(1 for reservation in items if reservation.state is state)

    return DashboardStats(
        total=page.meta.total_items,
        today=sum(1 for reservation in items if reservation.start_date == today),
        confirmed=count(ReservationState.CONFIRMED),
        pending=count(ReservationState.PENDING),
        rejected=count(ReservationState.REJECTED),
        cancelled=count(ReservationState.CANCELLED),
    )


class DashboardService:
    """Fetch the page and its catalogs concurrently; any failure fails the whole read."""

    def __init__(
        self,
        reservations,
        catalogs,
        settings: AppSettings,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('reservations.services.dashboard_service.DashboardService.__init__')
        self.reservations = reservations
        self.catalogs = catalogs
        self.settings = settings
        self._clock = clock or (lambda: local_now(settings.timezone))
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def load(self, filters: Optional[ReservationFilters] = None) -> Result[DashboardData]:
        t('reservations.services.dashboard_service.DashboardService.load')

        filters = filters or ReservationFilters(limit=self.settings.dashboard_page_limit)
        page, units, neighborhoods = await asyncio.gather(
            self.reservations.list(filters),
            self.catalogs.facility_units(),
            self.catalogs.neighborhoods(),
        )

        failure = first_error([page, units, neighborhoods])
        if failure is not None:
            self.logger.error("Dashboard load failed (%s): %s", failure.kind.value, failure.message)
            return failure

        return Ok(DashboardData(
            reservations=page.value,
            facility_units=units.value,
            neighborhoods=neighborhoods.value,
            stats=compute_stats(page.value, self._clock().date()),
        ))
