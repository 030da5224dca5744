"""REST adapter for facility-unit images."""

from __future__ import annotations
from tracking import t

import logging
from typing import List, Optional

from facilities.models import FacilityImage
from infrastructure import wire
from infrastructure.error_wrapper import CallShape, execute_with_domain_error
from infrastructure.http_client import ApiClient
from reservations.models.upload import UploadFile
from reservations.results import Result


class FacilityImageRepository:
    def __init__(self, api: ApiClient, logger: Optional[logging.Logger] = None) -> None:
        t('infrastructure.repositories.facility_image_repository.FacilityImageRepository.__init__')
        self.api = api
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def upload(
        self,
        facility_unit_id: int,
        file: UploadFile,
        *,
        is_feature: bool,
        display_order: int,
    ) -> Result[List[FacilityImage]]:
        """Upload one image as multipart ``file1``, ``isFeature1``, ``displayOrder1``."""
        t('infrastructure.repositories.facility_image_repository.FacilityImageRepository.upload')

        async def action() -> List[FacilityImage]:
            payload = await self.api.post(
                f'/sub-scenarios/{facility_unit_id}/images',
                data={
                    'isFeature1': 'true' if is_feature else 'false',
                    'displayOrder1': str(display_order),
                },
                files={'file1': file.as_multipart()},
            )
            if not payload:
                return []
            envelope = wire.FACILITY_IMAGES.validate_python(payload)
            return [
                FacilityImage(
                    id=item.id,
                    path=item.path,
                    is_feature=item.is_feature,
                    display_order=item.display_order,
                )
                for item in envelope.data
            ]

        return await execute_with_domain_error(
            action,
            f"Error uploading image for facility unit {facility_unit_id}",
            CallShape.COMMAND,
            log=self.logger,
        )

    async def delete(self, facility_unit_id: int, image_id: int) -> Result[None]:
        t('infrastructure.repositories.facility_image_repository.FacilityImageRepository.delete')

        async def action() -> None:
            await self.api.delete(f'/sub-scenarios/{facility_unit_id}/images/{image_id}')
            return None

        return await execute_with_domain_error(
            action,
            f"Error deleting image {image_id} of facility unit {facility_unit_id}",
            CallShape.COMMAND,
            log=self.logger,
        )
