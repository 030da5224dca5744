"""Dependency container wiring the reservation client together."""

from __future__ import annotations
from tracking import t

from typing import Any, Callable, Dict, Optional

import httpx

from facilities.images import FacilityImageManager
from infrastructure.cache import ResponseCache
from infrastructure.http_client import ApiClient, AuthContext
from infrastructure.repositories import (
    CatalogRepository,
    FacilityImageRepository,
    PaymentProofRepository,
    ReservationRepository,
)
from infrastructure.settings import AppSettings, get_settings
from reservations.availability.resolver import AvailabilityResolver
from reservations.services import (
    BulkStateTransitionCoordinator,
    DashboardService,
    ReservationConfirmationService,
    ReservationService,
)


class DependencyContainer:
    """Lazy dependency container with optional override support.

    Components are built on first access and then reused, so every service
    shares the same :class:`ApiClient` and :class:`ResponseCache`.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        *,
        auth: Optional[AuthContext] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        t('bootstrap.container.DependencyContainer.__init__')
        self.settings = settings or get_settings()
        self.auth = auth
        self.transport = transport
        self._cache: Dict[str, Any] = {}
        if overrides:
            self._cache.update(overrides)

    # ------------------------------------------------------------------
    # Internal helpers
    def _resolve(self, key: str, factory: Callable[[], Any]) -> Any:
        t('bootstrap.container.DependencyContainer._resolve')
        if key not in self._cache:
            self._cache[key] = factory()
        return self._cache[key]

    # ------------------------------------------------------------------
    # Infrastructure
    @property
    def api(self) -> ApiClient:
        return self._resolve(
            'api',
            lambda: ApiClient(self.settings, auth=self.auth, transport=self.transport),
        )

    @property
    def response_cache(self) -> ResponseCache:
        return self._resolve('response_cache', ResponseCache)

    @property
    def reservation_repository(self) -> ReservationRepository:
        return self._resolve(
            'reservation_repository',
            lambda: ReservationRepository(self.api, self.response_cache, self.settings),
        )

    @property
    def payment_proof_repository(self) -> PaymentProofRepository:
        return self._resolve('payment_proof_repository', lambda: PaymentProofRepository(self.api))

    @property
    def catalog_repository(self) -> CatalogRepository:
        return self._resolve('catalog_repository', lambda: CatalogRepository(self.api))

    @property
    def facility_image_repository(self) -> FacilityImageRepository:
        return self._resolve('facility_image_repository', lambda: FacilityImageRepository(self.api))

    # ------------------------------------------------------------------
    # Domain services
    @property
    def availability_resolver(self) -> AvailabilityResolver:
        t('bootstrap.container.DependencyContainer.availability_resolver')
        return self._resolve(
            'availability_resolver',
            lambda: AvailabilityResolver(self.reservation_repository),
        )

    @property
    def bulk_coordinator(self) -> BulkStateTransitionCoordinator:
        return self._resolve(
            'bulk_coordinator',
            lambda: BulkStateTransitionCoordinator(self.reservation_repository),
        )

    @property
    def reservation_service(self) -> ReservationService:
        t('bootstrap.container.DependencyContainer.reservation_service')
        return self._resolve(
            'reservation_service',
            lambda: ReservationService(
                self.reservation_repository,
                self.bulk_coordinator,
                self.settings,
            ),
        )

    @property
    def confirmation_service(self) -> ReservationConfirmationService:
        return self._resolve(
            'confirmation_service',
            lambda: ReservationConfirmationService(
                self.reservation_service,
                self.payment_proof_repository,
            ),
        )

    @property
    def dashboard_service(self) -> DashboardService:
        return self._resolve(
            'dashboard_service',
            lambda: DashboardService(
                self.reservation_service,
                self.catalog_repository,
                self.settings,
            ),
        )

    @property
    def image_manager(self) -> FacilityImageManager:
        return self._resolve(
            'image_manager',
            lambda: FacilityImageManager(self.facility_image_repository),
        )

    async def aclose(self) -> None:
        """Close the shared HTTP client if it was created."""
        t('bootstrap.container.DependencyContainer.aclose')
        api = self._cache.get('api')
        if api is not None:
            await api.aclose()
