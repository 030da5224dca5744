"""Facility-unit media management."""

from .images import FacilityImageManager, validate_image_file
from .models import (
    FacilityImage,
    ImageReconciliationResult,
    ImageSlot,
    ReconciliationStatus,
    SlotAction,
    SlotFailure,
)

__all__ = [
    "FacilityImage",
    "FacilityImageManager",
    "ImageReconciliationResult",
    "ImageSlot",
    "ReconciliationStatus",
    "SlotAction",
    "SlotFailure",
    "validate_image_file",
]
