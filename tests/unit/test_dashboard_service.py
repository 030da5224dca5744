from tracking import t
from datetime import date, datetime

import pytest

from reservations.errors import ErrorKind
from reservations.models.catalog import CatalogItem
from reservations.models.paging import Page, PageMeta
from reservations.models.reservation import ReservationState
from reservations.results import Err, Ok
from reservations.services.dashboard_service import DashboardService, compute_stats
from tests.helpers import DummyLogger, make_reservation, make_settings


def _page():
    return Page(
        data=[
            make_reservation(id=1, start_date=date(2025, 3, 10)),
            make_reservation(id=2, start_date=date(2025, 3, 10), state=ReservationState.CONFIRMED, state_id=2),
            make_reservation(id=3, start_date=date(2025, 3, 11), state=ReservationState.CANCELLED, state_id=4),
        ],
        meta=PageMeta(page=1, limit=7, total_items=40, total_pages=6),
    )


class FakeReservations:
    def __init__(self, result):
        self.result = result
        self.filters = None

    async def list(self, filters):
        self.filters = filters
        return self.result


class FakeCatalogs:
    def __init__(self, units=None, neighborhoods=None):
        self.units = units or Ok([CatalogItem(id=10, name="Cancha", parent_id=3)])
        self.hoods = neighborhoods or Ok([CatalogItem(id=1, name="Centro")])

    async def facility_units(self):
        return self.units

    async def neighborhoods(self):
        return self.hoods


def test_compute_stats_counts_states_and_today():
    t('tests.unit.test_dashboard_service.test_compute_stats_counts_states_and_today')
    stats = compute_stats(_page(), date(2025, 3, 10))

    assert stats.total == 40
    assert stats.today == 2
    assert stats.pending == 1
    assert stats.confirmed == 1
    assert stats.cancelled == 1
    assert stats.rejected == 0


@pytest.mark.asyncio
async def test_load_combines_page_catalogs_and_stats():
    t('tests.unit.test_dashboard_service.test_load_combines_page_catalogs_and_stats')
    reservations = FakeReservations(Ok(_page()))
    service = DashboardService(
        reservations,
        FakeCatalogs(),
        make_settings(),
        clock=lambda: datetime(2025, 3, 11, 8, 0),
        logger=DummyLogger(),
    )

    result = await service.load()

    data = result.value
    assert reservations.filters.limit == 7
    assert [item.name for item in data.facility_units] == ["Cancha"]
    assert data.neighborhoods[0].name == "Centro"
    assert data.stats.today == 1


@pytest.mark.asyncio
async def test_load_fails_when_any_part_fails():
    failure = Err.of(ErrorKind.TRANSPORT, "Error fetching neighborhoods: Request timeout")
    service = DashboardService(
        FakeReservations(Ok(_page())),
        FakeCatalogs(neighborhoods=failure),
        make_settings(),
        clock=lambda: datetime(2025, 3, 11, 8, 0),
        logger=DummyLogger(),
    )

    result = await service.load()

    assert result is failure
