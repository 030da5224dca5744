from tracking import t

import pytest
from pydantic import BaseModel

from infrastructure.error_wrapper import (
    CallShape,
    execute_with_domain_error,
    parse_conflicts,
    to_domain_error,
)
from infrastructure.http_client import ApiHttpError, ApiTransportError
from reservations.errors import ErrorKind, ReservationDomainError
from reservations.models.paging import Page
from tests.helpers import DummyLogger


def _raising(error):
    async def action():
        raise error

    return action


@pytest.mark.asyncio
async def test_success_is_wrapped_in_ok():
    t('tests.unit.test_error_wrapper.test_success_is_wrapped_in_ok')

    async def action():
        return 42

    result = await execute_with_domain_error(action, "Error", log=DummyLogger())

    assert result.ok
    assert result.value == 42


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "shape, expected",
    [
        (CallShape.LIST, []),
        (CallShape.SINGLE, None),
    ],
)
async def test_post_logout_401_returns_empty_value(shape, expected):
    t('tests.unit.test_error_wrapper.test_post_logout_401_returns_empty_value')
    error = ApiHttpError(401, "Authentication required - session ended", post_logout=True)

    result = await execute_with_domain_error(_raising(error), "Error fetching", shape, log=DummyLogger())

    assert result.ok
    assert result.value == expected


@pytest.mark.asyncio
async def test_post_logout_401_for_page_returns_empty_page():
    error = ApiHttpError(401, "session ended", post_logout=True)

    result = await execute_with_domain_error(_raising(error), "Error", CallShape.PAGE, log=DummyLogger())

    assert isinstance(result.value, Page)
    assert result.value.data == []
    assert result.value.meta.total_items == 0


@pytest.mark.asyncio
async def test_post_logout_401_for_command_is_authorization_error():
    t('tests.unit.test_error_wrapper.test_post_logout_401_for_command_is_authorization_error')
    error = ApiHttpError(401, "session ended", post_logout=True)

    result = await execute_with_domain_error(_raising(error), "Error", CallShape.COMMAND, log=DummyLogger())

    assert not result.ok
    assert result.kind is ErrorKind.AUTHORIZATION


@pytest.mark.asyncio
async def test_regular_401_is_not_suppressed():
    error = ApiHttpError(401, "Unauthorized")

    result = await execute_with_domain_error(_raising(error), "Error", CallShape.LIST, log=DummyLogger())

    assert result.kind is ErrorKind.AUTHORIZATION


@pytest.mark.asyncio
async def test_404_on_single_read_means_absent():
    t('tests.unit.test_error_wrapper.test_404_on_single_read_means_absent')
    error = ApiHttpError(404, "Reservation not found")

    single = await execute_with_domain_error(_raising(error), "Error", CallShape.SINGLE, log=DummyLogger())
    command = await execute_with_domain_error(_raising(error), "Error", CallShape.COMMAND, log=DummyLogger())

    assert single.ok and single.value is None
    assert command.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, kind",
    [
        (400, ErrorKind.VALIDATION),
        (403, ErrorKind.AUTHORIZATION),
        (409, ErrorKind.CONFLICT),
        (500, ErrorKind.TRANSPORT),
        (503, ErrorKind.TRANSPORT),
    ],
)
async def test_status_codes_map_to_error_kinds(status, kind):
    error = ApiHttpError(status, "boom")

    result = await execute_with_domain_error(_raising(error), "Error creating reservation", log=DummyLogger())

    assert result.kind is kind
    assert result.status_code == status
    assert result.message == f"Error creating reservation (Backend {status}: boom)"


@pytest.mark.asyncio
async def test_conflicts_are_enumerated_in_server_order():
    t('tests.unit.test_error_wrapper.test_conflicts_are_enumerated_in_server_order')
    error = ApiHttpError(
        409,
        "Some slots are already booked",
        details={
            'conflicts': [
                {'date': '2025-03-12', 'timeslotId': 7},
                {'reservationDate': '2025-03-10', 'timeSlotId': 5},
            ]
        },
    )

    result = await execute_with_domain_error(_raising(error), "Error creating reservation", log=DummyLogger())

    assert result.kind is ErrorKind.CONFLICT
    assert result.message == (
        "Some slots are already booked: Fecha 2025-03-12, horario 7; Fecha 2025-03-10, horario 5"
    )
    assert [c.timeslot_id for c in result.conflicts] == [7, 5]


@pytest.mark.asyncio
async def test_transport_errors_and_timeouts():
    t('tests.unit.test_error_wrapper.test_transport_errors_and_timeouts')
    error = ApiTransportError("Request timeout", timed_out=True)

    result = await execute_with_domain_error(_raising(error), "Error updating reservations", log=DummyLogger())

    assert result.kind is ErrorKind.TRANSPORT
    assert result.message == "Error updating reservations: Request timeout"
    assert result.error.cause is error


@pytest.mark.asyncio
async def test_domain_errors_are_not_wrapped_twice():
    original = ReservationDomainError("Invalid reservation data", kind=ErrorKind.INVALID_DATA)

    result = await execute_with_domain_error(_raising(original), "Error fetching", log=DummyLogger())

    assert result.error is original


@pytest.mark.asyncio
async def test_schema_errors_become_invalid_data():
    t('tests.unit.test_error_wrapper.test_schema_errors_become_invalid_data')

    class Payload(BaseModel):
        id: int

    async def action():
        return Payload.model_validate({'id': 'not-a-number'})

    result = await execute_with_domain_error(action, "Error fetching reservations", log=DummyLogger())

    assert result.kind is ErrorKind.INVALID_DATA


@pytest.mark.asyncio
async def test_unexpected_exceptions_propagate():
    with pytest.raises(KeyError):
        await execute_with_domain_error(_raising(KeyError('x')), "Error", log=DummyLogger())


def test_parse_conflicts_skips_malformed_entries():
    conflicts = parse_conflicts([
        {'date': '2025-03-10', 'timeslotId': 'abc'},
        {'date': '2025-03-11'},
        'junk',
        {'date': '2025-03-12', 'timeslotId': 3},
    ])

    assert [(c.date, c.timeslot_id) for c in conflicts] == [('2025-03-12', 3)]
    assert parse_conflicts(None) == []


def test_to_domain_error_keeps_existing_domain_error():
    error = ReservationDomainError("already mapped", kind=ErrorKind.NOT_FOUND)

    assert to_domain_error(error, "context") is error
