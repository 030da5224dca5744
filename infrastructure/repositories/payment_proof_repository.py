"""REST adapter for payment proofs."""

from __future__ import annotations
from tracking import t

import logging
from typing import List, Optional

from infrastructure import wire
from infrastructure.error_wrapper import CallShape, execute_with_domain_error
from infrastructure.http_client import ApiClient
from infrastructure.transformers import payment_proof_from_wire
from reservations.models.payment_proof import PaymentProof
from reservations.results import Result
from reservations.models.upload import UploadFile


class PaymentProofRepository:
    def __init__(self, api: ApiClient, logger: Optional[logging.Logger] = None) -> None:
        t('infrastructure.repositories.payment_proof_repository.PaymentProofRepository.__init__')
        self.api = api
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def list_for_reservation(self, reservation_id: int) -> Result[List[PaymentProof]]:
        t('infrastructure.repositories.payment_proof_repository.PaymentProofRepository.list_for_reservation')

        async def action() -> List[PaymentProof]:
            payload = await self.api.get(f'/payment-proofs/reservation/{reservation_id}')
            if not payload:
                return []
            envelope = wire.PAYMENT_PROOFS.validate_python(payload)
            return [payment_proof_from_wire(item) for item in envelope.data]

        return await execute_with_domain_error(
            action,
            f"Error fetching payment proofs for reservation {reservation_id}",
            CallShape.LIST,
            log=self.logger,
        )

    async def upload(
        self,
        reservation_id: int,
        uploader_id: int,
        file: UploadFile,
    ) -> Result[PaymentProof]:
        """Send ``file`` as multipart ``file, reservationId, uploadedByUserId``."""
        t('infrastructure.repositories.payment_proof_repository.PaymentProofRepository.upload')

        async def action() -> PaymentProof:
            payload = await self.api.post(
                '/payment-proofs/upload',
                data={
                    'reservationId': str(reservation_id),
                    'uploadedByUserId': str(uploader_id),
                },
                files={'file': file.as_multipart()},
            )
            envelope = wire.PAYMENT_PROOF.validate_python(payload)
            return payment_proof_from_wire(envelope.data)

        return await execute_with_domain_error(
            action,
            f"Error uploading payment proof for reservation {reservation_id}",
            CallShape.COMMAND,
            log=self.logger,
        )
