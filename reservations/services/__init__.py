"""Reservation use cases composed over the REST adapters."""

from .bulk_transition import BulkStateTransitionCoordinator
from .confirmation_service import ReservationConfirmationService
from .dashboard_service import DashboardData, DashboardService, DashboardStats
from .reservation_service import ReservationService

__all__ = [
    "BulkStateTransitionCoordinator",
    "DashboardData",
    "DashboardService",
    "DashboardStats",
    "ReservationConfirmationService",
    "ReservationService",
]
