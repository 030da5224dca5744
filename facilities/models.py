"""Value objects for facility-unit media."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from reservations.models.upload import UploadFile


class SlotAction(Enum):
    KEEP = "keep"
    REPLACE = "replace"
    DELETE = "delete"


class ReconciliationStatus(Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"


@dataclass(frozen=True)
class FacilityImage:
    id: int
    path: str
    is_feature: bool = False
    display_order: int = 0


@dataclass(frozen=True)
class ImageSlot:
    """Desired state of one of the three media positions of a facility unit."""

    name: str
    action: SlotAction = SlotAction.KEEP
    new_file: Optional[UploadFile] = None
    existing_image: Optional[FacilityImage] = None

    @property
    def is_feature(self) -> bool:
        return self.name == "featured"


@dataclass(frozen=True)
class SlotFailure:
    slot: str
    operation: str
    error: str


@dataclass(frozen=True)
class ImageReconciliationResult:
    status: ReconciliationStatus
    deleted_ids: Tuple[int, ...] = field(default_factory=tuple)
    uploaded: Tuple[FacilityImage, ...] = field(default_factory=tuple)
    failures: Tuple[SlotFailure, ...] = field(default_factory=tuple)
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is ReconciliationStatus.SUCCESS
