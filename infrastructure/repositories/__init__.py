"""REST adapters used by the reservation services."""

from .catalog_repository import CatalogRepository
from .facility_image_repository import FacilityImageRepository
from .payment_proof_repository import PaymentProofRepository
from .reservation_repository import ReservationRepository

__all__ = [
    "CatalogRepository",
    "FacilityImageRepository",
    "PaymentProofRepository",
    "ReservationRepository",
]
