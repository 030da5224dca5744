"""Confirmation workflow gated by payment proof for cost-bearing facilities."""

from __future__ import annotations
from tracking import t

import logging
from typing import List, Optional

from infrastructure import constants
from reservations.errors import ErrorKind
from reservations.models.payment_proof import PaymentProof
from reservations.models.reservation import Reservation, ReservationState
from reservations.models.upload import UploadFile
from reservations.results import Err, Result
from reservations.services.reservation_service import ReservationService


class ReservationConfirmationService:
    """Confirm pending reservations once payment is evidenced or justified."""

    def __init__(
        self,
        reservations: ReservationService,
        proofs,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('reservations.services.confirmation_service.ReservationConfirmationService.__init__')
        self.reservations = reservations
        self.proofs = proofs
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def confirm(
        self,
        reservation: Reservation,
        justification: Optional[str] = None,
    ) -> Result[Reservation]:
        """Confirm ``reservation``.

        Free facilities confirm directly. For a cost-bearing facility at least
        one uploaded payment proof or a non-blank justification is required;
        the justification travels with the state change.
        """

        t('reservations.services.confirmation_service.ReservationConfirmationService.confirm')

        if not reservation.is_pending():
            return Err.of(
                ErrorKind.VALIDATION,
                f"Only pending reservations can be confirmed; {reservation.id} is {reservation.state.value}",
            )

        note = (justification or "").strip() or None
        if note is not None and len(note) > constants.MAX_JUSTIFICATION_LENGTH:
            return Err.of(
                ErrorKind.VALIDATION,
                f"Justification cannot exceed {constants.MAX_JUSTIFICATION_LENGTH} characters",
            )

        if reservation.has_cost and note is None:
            proofs = await self.proofs.list_for_reservation(reservation.id)
            if not proofs.ok:
                return proofs
            if not proofs.value:
                self.logger.info(
                    "Refusing to confirm reservation %s without payment proof or justification",
                    reservation.id,
                )
                return Err.of(
                    ErrorKind.VALIDATION,
                    "A payment proof or a justification is required to confirm a paid reservation",
                )

        return await self.reservations.transition(reservation, ReservationState.CONFIRMED, note)

    async def proofs_for(self, reservation_id: int) -> Result[List[PaymentProof]]:
        t('reservations.services.confirmation_service.ReservationConfirmationService.proofs_for')
        return await self.proofs.list_for_reservation(reservation_id)

    async def upload_proof(
        self,
        reservation_id: int,
        uploader_id: int,
        file: UploadFile,
    ) -> Result[PaymentProof]:
        t('reservations.services.confirmation_service.ReservationConfirmationService.upload_proof')

        if reservation_id <= 0 or uploader_id <= 0:
            return Err.of(ErrorKind.VALIDATION, "Reservation and uploader ids must be positive")
        if not file.content:
            return Err.of(ErrorKind.VALIDATION, f"File {file.filename} is empty")

        result = await self.proofs.upload(reservation_id, uploader_id, file)
        if result.ok:
            self.logger.info("Stored payment proof %s for reservation %s", result.value.id, reservation_id)
        return result
