"""Domain error type shared by every reservation operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


class ErrorKind(Enum):
    """Why an operation could not complete."""

    VALIDATION = "validation"          # Rejected locally (or by the remote) before any change
    CONFLICT = "conflict"              # Requested slots are already taken
    TRANSPORT = "transport"            # Network, timeout or 5xx
    NOT_FOUND = "not_found"
    AUTHORIZATION = "authorization"
    INVALID_DATA = "invalid_data"      # Source record could not be turned into an entity
    PARTIAL_FAILURE = "partial_failure"


@dataclass(frozen=True)
class ConflictDetail:
    """A (date, time slot) pair the remote service could not grant."""

    date: str
    timeslot_id: int

    def describe(self) -> str:
        return f"Fecha {self.date}, horario {self.timeslot_id}"


def format_conflict_message(base_message: str, conflicts: Iterable[ConflictDetail]) -> str:
    """Append the enumerated conflicts to ``base_message`` keeping server order."""

    fragments = [conflict.describe() for conflict in conflicts]
    if not fragments:
        return base_message
    base = base_message.rstrip().rstrip(".:")
    return f"{base}: {'; '.join(fragments)}"


class ReservationDomainError(Exception):
    """Single error type surfaced by the reservation domain.

    ``conflicts`` keeps the structured payload of a rejected submission so
    callers can render the exact dates and slots, ``cause`` keeps the
    original failure for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.TRANSPORT,
        conflicts: Iterable[ConflictDetail] = (),
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.conflicts: Tuple[ConflictDetail, ...] = tuple(conflicts)
        self.status_code = status_code
        self.cause = cause

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def __repr__(self) -> str:
        return (
            f"ReservationDomainError(kind={self.kind.value!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


def validation_error(message: str) -> ReservationDomainError:
    return ReservationDomainError(message, kind=ErrorKind.VALIDATION)


def invalid_data_error(message: str, cause: Optional[BaseException] = None) -> ReservationDomainError:
    return ReservationDomainError(message, kind=ErrorKind.INVALID_DATA, cause=cause)
