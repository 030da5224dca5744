"""Explicit success/failure values threaded through the reservation layer.

Resolver, coordinator and the remote-call wrapper return ``Ok`` or ``Err``
instead of raising, so each caller can branch on ``result.ok`` and
``result.kind`` rather than catching error subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Optional, Tuple, TypeVar, Union

from reservations.errors import ConflictDetail, ErrorKind, ReservationDomainError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    @property
    def kind(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        return Ok(func(self.value))


@dataclass(frozen=True)
class Err:
    """Failed outcome wrapping a :class:`ReservationDomainError`."""

    error: ReservationDomainError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def conflicts(self) -> Tuple[ConflictDetail, ...]:
        return self.error.conflicts

    @property
    def status_code(self) -> Optional[int]:
        return self.error.status_code

    def unwrap(self) -> Any:
        raise self.error

    def map(self, func: Callable[[Any], Any]) -> "Err":
        return self

    @classmethod
    def of(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        conflicts: Iterable[ConflictDetail] = (),
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> "Err":
        return cls(
            ReservationDomainError(
                message,
                kind=kind,
                conflicts=conflicts,
                status_code=status_code,
                cause=cause,
            )
        )


Result = Union[Ok[T], Err]


def first_error(results: Iterable[Union[Ok[Any], Err]]) -> Optional[Err]:
    """Return the first ``Err`` in ``results`` or ``None`` when all succeeded."""

    for result in results:
        if not result.ok:
            return result
    return None
