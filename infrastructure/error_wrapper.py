"""Normalise every failure of a remote call into a ``Result``."""

from __future__ import annotations
from tracking import t

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import pydantic

from infrastructure.http_client import ApiHttpError, ApiTransportError
from reservations.errors import (
    ConflictDetail,
    ErrorKind,
    ReservationDomainError,
    format_conflict_message,
)
from reservations.models.paging import Page
from reservations.results import Err, Ok, Result

T = TypeVar("T")

logger = logging.getLogger('ErrorWrapper')


class CallShape(Enum):
    """What a call returns; decides the empty value after a logout race."""

    PAGE = "page"
    LIST = "list"
    SINGLE = "single"
    COMMAND = "command"


_STATUS_KINDS = {
    400: ErrorKind.VALIDATION,
    422: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHORIZATION,
    403: ErrorKind.AUTHORIZATION,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
}


def _empty_value(shape: CallShape) -> Result[Any]:
    if shape is CallShape.PAGE:
        return Ok(Page.empty())
    if shape is CallShape.LIST:
        return Ok([])
    if shape is CallShape.SINGLE:
        return Ok(None)
    return Err.of(
        ErrorKind.AUTHORIZATION,
        "Session ended; sign in again to continue",
        status_code=401,
    )


def parse_conflicts(raw: Any) -> List[ConflictDetail]:
    """Read ``details.conflicts`` entries, keeping server order."""

    t('infrastructure.error_wrapper.parse_conflicts')
    conflicts: List[ConflictDetail] = []
    if not isinstance(raw, list):
        return conflicts
    for item in raw:
        if not isinstance(item, dict):
            continue
        day = item.get('date') or item.get('reservationDate')
        slot = item.get('timeslotId', item.get('timeSlotId'))
        if day is None or slot is None:
            continue
        try:
            conflicts.append(ConflictDetail(date=str(day), timeslot_id=int(slot)))
        except (TypeError, ValueError):
            logger.debug("Skipping malformed conflict entry %r", item)
    return conflicts


def to_domain_error(error: BaseException, error_message: str) -> ReservationDomainError:
    """Translate a transport or parsing failure into a domain error."""

    t('infrastructure.error_wrapper.to_domain_error')

    if isinstance(error, ReservationDomainError):
        return error

    if isinstance(error, ApiHttpError):
        conflicts = parse_conflicts(error.conflicts)
        if conflicts:
            return ReservationDomainError(
                format_conflict_message(error.message or error_message, conflicts),
                kind=ErrorKind.CONFLICT,
                conflicts=conflicts,
                status_code=error.status_code,
                cause=error,
            )
        kind = _STATUS_KINDS.get(error.status_code, ErrorKind.TRANSPORT)
        return ReservationDomainError(
            f"{error_message} (Backend {error.status_code}: {error.message})",
            kind=kind,
            status_code=error.status_code,
            cause=error,
        )

    if isinstance(error, ApiTransportError):
        return ReservationDomainError(
            f"{error_message}: {error.message}",
            kind=ErrorKind.TRANSPORT,
            cause=error,
        )

    if isinstance(error, pydantic.ValidationError):
        return ReservationDomainError(
            f"{error_message}: unexpected response format",
            kind=ErrorKind.INVALID_DATA,
            cause=error,
        )

    return ReservationDomainError(
        f"{error_message}: {error}",
        kind=ErrorKind.TRANSPORT,
        cause=error,
    )


async def execute_with_domain_error(
    action: Callable[[], Awaitable[T]],
    error_message: str,
    shape: CallShape = CallShape.COMMAND,
    *,
    log: Optional[logging.Logger] = None,
) -> Result[T]:
    """Run ``action`` and return ``Ok(value)`` or an ``Err`` with a domain error.

    Args:
        action: Zero-argument coroutine factory performing the remote call.
        error_message: Context prepended to generic failures.
        shape: Return shape of the call; decides the empty value used when a
            401 arrives after the session has ended, and whether a 404 means
            "absent" (``SINGLE``) rather than an error.
        log: Logger for the failure line; defaults to the module logger.

    Returns:
        ``Ok`` with the action's value, or ``Err`` wrapping exactly one
        :class:`ReservationDomainError`.
    """

    t('infrastructure.error_wrapper.execute_with_domain_error')
    log = log or logger

    try:
        return Ok(await action())
    except ReservationDomainError as exc:
        return Err(exc)
    except ApiHttpError as exc:
        if exc.status_code == 401 and exc.post_logout:
            log.info("Ignoring post-logout 401 for %s (%s)", error_message, shape.value)
            return _empty_value(shape)
        if exc.status_code == 404 and shape is CallShape.SINGLE:
            return Ok(None)
        domain_error = to_domain_error(exc, error_message)
        log.warning("%s [%s]: %s", error_message, domain_error.kind.value, domain_error.message)
        return Err(domain_error)
    except (ApiTransportError, pydantic.ValidationError) as exc:
        domain_error = to_domain_error(exc, error_message)
        log.warning("%s [%s]: %s", error_message, domain_error.kind.value, domain_error.message)
        return Err(domain_error)
