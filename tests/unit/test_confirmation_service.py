from tracking import t

import pytest

from reservations.errors import ErrorKind
from reservations.models.payment_proof import PaymentProof
from reservations.models.reservation import FacilitySnapshot, ReservationState
from reservations.models.upload import UploadFile
from reservations.results import Err, Ok
from reservations.services.confirmation_service import ReservationConfirmationService
from tests.helpers import DummyLogger, make_reservation


class FakeReservations:
    def __init__(self):
        self.transitions = []

    async def transition(self, reservation, target, justification=None):
        t('tests.unit.test_confirmation_service.FakeReservations.transition')
        self.transitions.append((reservation.id, target, justification))
        return Ok(reservation.transition_to(target))


class FakeProofs:
    def __init__(self, proofs=None, error=None):
        self.proofs = proofs or []
        self.error = error
        self.uploads = []

    async def list_for_reservation(self, reservation_id):
        if self.error is not None:
            return self.error
        return Ok(list(self.proofs))

    async def upload(self, reservation_id, uploader_id, file):
        self.uploads.append((reservation_id, uploader_id, file.filename))
        return Ok(PaymentProof(id=9, reservation_id=reservation_id, file_url="/proofs/9.pdf"))


def _paid_reservation(**overrides):
    return make_reservation(facility=FacilitySnapshot(id=10, name="Coliseo", has_cost=True), **overrides)


def _service(proofs):
    reservations = FakeReservations()
    return ReservationConfirmationService(reservations, proofs, logger=DummyLogger()), reservations


@pytest.mark.asyncio
async def test_free_facility_confirms_directly():
    t('tests.unit.test_confirmation_service.test_free_facility_confirms_directly')
    service, reservations = _service(FakeProofs())

    result = await service.confirm(make_reservation())

    assert result.value.state is ReservationState.CONFIRMED
    assert reservations.transitions == [(1, ReservationState.CONFIRMED, None)]


@pytest.mark.asyncio
async def test_paid_facility_without_proof_or_justification_is_refused():
    t('tests.unit.test_confirmation_service.test_paid_facility_without_proof_or_justification_is_refused')
    service, reservations = _service(FakeProofs())

    result = await service.confirm(_paid_reservation(), justification="   ")

    assert result.kind is ErrorKind.VALIDATION
    assert reservations.transitions == []


@pytest.mark.asyncio
async def test_paid_facility_with_proof_confirms():
    proof = PaymentProof(id=3, reservation_id=1, file_url="/proofs/3.png")
    service, reservations = _service(FakeProofs([proof]))

    result = await service.confirm(_paid_reservation())

    assert result.ok
    assert reservations.transitions[0][2] is None


@pytest.mark.asyncio
async def test_justification_travels_with_the_state_change():
    service, reservations = _service(FakeProofs())

    await service.confirm(_paid_reservation(), justification="  Pago en taquilla ")

    assert reservations.transitions == [(1, ReservationState.CONFIRMED, "Pago en taquilla")]


@pytest.mark.asyncio
async def test_confirm_rejects_non_pending_and_long_justification():
    service, _ = _service(FakeProofs())

    confirmed = await service.confirm(make_reservation(state=ReservationState.CONFIRMED, state_id=2))
    too_long = await service.confirm(_paid_reservation(), justification="x" * 501)

    assert confirmed.kind is ErrorKind.VALIDATION
    assert too_long.kind is ErrorKind.VALIDATION


@pytest.mark.asyncio
async def test_proof_lookup_failure_is_returned():
    error = Err.of(ErrorKind.TRANSPORT, "down")
    service, reservations = _service(FakeProofs(error=error))

    result = await service.confirm(_paid_reservation())

    assert result is error
    assert reservations.transitions == []


@pytest.mark.asyncio
async def test_upload_proof_validates_input():
    t('tests.unit.test_confirmation_service.test_upload_proof_validates_input')
    proofs = FakeProofs()
    service, _ = _service(proofs)
    receipt = UploadFile(filename="recibo.pdf", content_type="application/pdf", content=b"%PDF")

    empty = await service.upload_proof(1, 100, UploadFile("vacio.pdf", "application/pdf", b""))
    bad_ids = await service.upload_proof(0, 100, receipt)
    stored = await service.upload_proof(1, 100, receipt)

    assert empty.kind is ErrorKind.VALIDATION
    assert bad_ids.kind is ErrorKind.VALIDATION
    assert stored.value.id == 9
    assert proofs.uploads == [(1, 100, "recibo.pdf")]
