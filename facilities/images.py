"""Reconcile the three image slots of a facility unit with the remote store."""

from __future__ import annotations
from tracking import t

import logging
from typing import Iterable, List, Optional, Sequence

from facilities.models import (
    FacilityImage,
    ImageReconciliationResult,
    ImageSlot,
    ReconciliationStatus,
    SlotAction,
    SlotFailure,
)
from infrastructure import constants
from reservations.errors import ErrorKind
from reservations.models.upload import UploadFile
from reservations.results import Err, Ok, Result

PARTIAL_MESSAGE = "Facility saved, but some images could not be updated"
FAILURE_MESSAGE = "Facility images were not saved"


def validate_image_file(file: UploadFile) -> Optional[str]:
    """Return an error message when ``file`` is not an accepted image, else ``None``."""

    t('facilities.images.validate_image_file')
    if (file.content_type or "").lower() not in constants.ALLOWED_IMAGE_TYPES:
        return (
            f"File {file.filename} has unsupported type {file.content_type or 'unknown'}; "
            "allowed: JPEG, PNG, GIF, WEBP"
        )
    if file.size > constants.MAX_IMAGE_SIZE:
        size_mb = file.size / (1024 * 1024)
        return f"File {file.filename} is {size_mb:.1f}MB; maximum is 5MB"
    return None


class FacilityImageManager:
    """Apply slot decisions: validate, delete, then upload.

    Deletions run before uploads and are never rolled back; each step is
    attempted even when an earlier one failed, and every failure is reported
    in the aggregate result.
    """

    def __init__(self, repository, logger: Optional[logging.Logger] = None) -> None:
        t('facilities.images.FacilityImageManager.__init__')
        self.repository = repository
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def validate(self, slots: Sequence[ImageSlot]) -> List[str]:
        t('facilities.images.FacilityImageManager.validate')

        errors: List[str] = []
        seen = set()
        for slot in slots:
            if slot.name not in constants.IMAGE_SLOT_NAMES:
                errors.append(f"Unknown image slot {slot.name!r}")
                continue
            if slot.name in seen:
                errors.append(f"Image slot {slot.name!r} given more than once")
            seen.add(slot.name)
            if slot.action is SlotAction.REPLACE and slot.new_file is None:
                errors.append(f"Slot {slot.name} is marked for replacement without a file")
            if slot.new_file is not None:
                problem = validate_image_file(slot.new_file)
                if problem:
                    errors.append(problem)
        return errors

    async def reconcile(
        self,
        facility_unit_id: int,
        slots: Sequence[ImageSlot],
    ) -> Result[ImageReconciliationResult]:
        """Bring the unit's images in line with ``slots``.

        Returns:
            ``Err(VALIDATION)`` when any slot is invalid (nothing is sent),
            otherwise ``Ok`` with a SUCCESS, PARTIAL or FAILURE aggregate.
        """

        t('facilities.images.FacilityImageManager.reconcile')

        errors = self.validate(slots)
        if errors:
            self.logger.info("Image changes for unit %s rejected: %s", facility_unit_id, "; ".join(errors))
            return Err.of(ErrorKind.VALIDATION, "; ".join(errors))

        failures: List[SlotFailure] = []
        deleted: List[int] = []
        uploaded: List[FacilityImage] = []

        for slot in self._deletions(slots):
            image_id = slot.existing_image.id
            result = await self.repository.delete(facility_unit_id, image_id)
            if result.ok:
                deleted.append(image_id)
            else:
                self.logger.warning(
                    "Could not delete image %s (slot %s) of unit %s: %s",
                    image_id,
                    slot.name,
                    facility_unit_id,
                    result.message,
                )
                failures.append(SlotFailure(slot=slot.name, operation="delete", error=result.message))

        for slot in self._uploads(slots):
            result = await self.repository.upload(
                facility_unit_id,
                slot.new_file,
                is_feature=slot.is_feature,
                display_order=constants.IMAGE_SLOT_NAMES.index(slot.name),
            )
            if result.ok:
                uploaded.extend(result.value)
            else:
                self.logger.warning(
                    "Could not upload %s (slot %s) for unit %s: %s",
                    slot.new_file.filename,
                    slot.name,
                    facility_unit_id,
                    result.message,
                )
                failures.append(SlotFailure(slot=slot.name, operation="upload", error=result.message))

        return Ok(self._summarise(deleted, uploaded, failures))

    @staticmethod
    def _deletions(slots: Iterable[ImageSlot]) -> List[ImageSlot]:
        return [
            slot for slot in slots
            if slot.action is SlotAction.DELETE and slot.existing_image is not None
        ]

    @staticmethod
    def _uploads(slots: Iterable[ImageSlot]) -> List[ImageSlot]:
        return [
            slot for slot in slots
            if slot.action is not SlotAction.DELETE and slot.new_file is not None
        ]

    def _summarise(
        self,
        deleted: List[int],
        uploaded: List[FacilityImage],
        failures: List[SlotFailure],
    ) -> ImageReconciliationResult:
        t('facilities.images.FacilityImageManager._summarise')

        if not failures:
            status = ReconciliationStatus.SUCCESS
            message = "Facility images updated"
        elif deleted or uploaded:
            status = ReconciliationStatus.PARTIAL
            message = PARTIAL_MESSAGE
        else:
            status = ReconciliationStatus.FAILURE
            message = FAILURE_MESSAGE

        return ImageReconciliationResult(
            status=status,
            deleted_ids=tuple(deleted),
            uploaded=tuple(uploaded),
            failures=tuple(failures),
            message=message,
        )
