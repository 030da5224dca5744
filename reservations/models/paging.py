"""Paging envelope and list filters for reservation queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Generic, List, Optional, TypeVar

from infrastructure import constants

T = TypeVar("T")


@dataclass(frozen=True)
class PageMeta:
    page: int = 1
    limit: int = constants.DEFAULT_PAGE_LIMIT
    total_items: int = 0
    total_pages: int = 0


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the remote paging metadata."""

    data: List[T] = field(default_factory=list)
    meta: PageMeta = field(default_factory=PageMeta)

    @classmethod
    def empty(cls, limit: int = constants.DEFAULT_PAGE_LIMIT) -> "Page[T]":
        return cls(data=[], meta=PageMeta(page=1, limit=limit, total_items=0, total_pages=0))

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self):
        return iter(self.data)


@dataclass(frozen=True)
class ReservationFilters:
    """Query parameters understood by ``GET /reservations``."""

    page: int = 1
    limit: int = constants.DEFAULT_PAGE_LIMIT
    search: Optional[str] = None
    scenario_id: Optional[int] = None
    sub_scenario_id: Optional[int] = None
    activity_area_id: Optional[int] = None
    neighborhood_id: Optional[int] = None
    user_id: Optional[int] = None
    state_ids: Optional[List[int]] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    active: Optional[bool] = None

    def to_query(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {'page': self.page, 'limit': self.limit}
        if self.search:
            params['search'] = self.search
        if self.scenario_id is not None:
            params['scenarioId'] = self.scenario_id
        if self.sub_scenario_id is not None:
            params['subScenarioId'] = self.sub_scenario_id
        if self.activity_area_id is not None:
            params['activityAreaId'] = self.activity_area_id
        if self.neighborhood_id is not None:
            params['neighborhoodId'] = self.neighborhood_id
        if self.user_id is not None:
            params['userId'] = self.user_id
        if self.state_ids:
            params['reservationStateIds'] = ",".join(str(sid) for sid in self.state_ids)
        if self.date_from is not None:
            params['dateFrom'] = self.date_from.isoformat()
        if self.date_to is not None:
            params['dateTo'] = self.date_to.isoformat()
        if self.active is not None:
            params['active'] = "true" if self.active else "false"
        return params
