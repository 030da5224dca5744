"""Read-only catalogs shown next to reservation lists."""

from __future__ import annotations
from tracking import t

import logging
from typing import List, Optional

from infrastructure import wire
from infrastructure.error_wrapper import CallShape, execute_with_domain_error
from infrastructure.http_client import ApiClient
from reservations.models.catalog import CatalogItem
from reservations.results import Result


class CatalogRepository:
    """Facility units (``/sub-scenarios``) and neighborhoods."""

    def __init__(self, api: ApiClient, logger: Optional[logging.Logger] = None) -> None:
        t('infrastructure.repositories.catalog_repository.CatalogRepository.__init__')
        self.api = api
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def facility_units(self, limit: int = 100) -> Result[List[CatalogItem]]:
        t('infrastructure.repositories.catalog_repository.CatalogRepository.facility_units')
        return await self._fetch('/sub-scenarios', {'page': 1, 'limit': limit}, "Error fetching facilities")

    async def neighborhoods(self) -> Result[List[CatalogItem]]:
        t('infrastructure.repositories.catalog_repository.CatalogRepository.neighborhoods')
        return await self._fetch('/neighborhoods', None, "Error fetching neighborhoods")

    async def _fetch(self, path: str, params: Optional[dict], error_message: str) -> Result[List[CatalogItem]]:
        async def action() -> List[CatalogItem]:
            payload = await self.api.get(path, params=params)
            if not payload:
                return []
            envelope = wire.CATALOG.validate_python(payload)
            return [
                CatalogItem(id=item.id, name=item.name, parent_id=item.scenario_id)
                for item in envelope.data
            ]

        return await execute_with_domain_error(action, error_message, CallShape.LIST, log=self.logger)
