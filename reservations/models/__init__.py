"""Domain model definitions for the reservation client."""

from .reservation import (
    FacilitySnapshot,
    Reservation,
    ReservationDraft,
    ReservationKind,
    ReservationState,
    ScenarioSnapshot,
    TimeSlot,
    UserSnapshot,
)
from .availability import (
    AvailabilityConfiguration,
    AvailabilityStats,
    SimplifiedAvailabilityResult,
    SlotAvailability,
)
from .bulk import BulkItemError, BulkUpdateResult
from .paging import Page, PageMeta, ReservationFilters
from .catalog import CatalogItem
from .payment_proof import PaymentProof
from .upload import UploadFile

__all__ = [
    "AvailabilityConfiguration",
    "AvailabilityStats",
    "BulkItemError",
    "BulkUpdateResult",
    "CatalogItem",
    "FacilitySnapshot",
    "Page",
    "PageMeta",
    "PaymentProof",
    "Reservation",
    "ReservationDraft",
    "ReservationFilters",
    "ReservationKind",
    "ReservationState",
    "ScenarioSnapshot",
    "SimplifiedAvailabilityResult",
    "SlotAvailability",
    "TimeSlot",
    "UploadFile",
    "UserSnapshot",
]
