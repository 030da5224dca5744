"""Aggregate outcome of a multi-reservation state change."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .reservation import Reservation


@dataclass(frozen=True)
class BulkItemError:
    reservation_id: int
    error: str


@dataclass(frozen=True)
class BulkUpdateResult:
    """What a bulk transition applied, and what it did not.

    ``success`` reflects whether the remote call went through; callers that
    need to know about silently skipped ids check ``missing_ids``.
    """

    success: bool
    updated_count: int
    updated: Tuple[Reservation, ...] = field(default_factory=tuple)
    errors: Tuple[BulkItemError, ...] = field(default_factory=tuple)
    requested_ids: Tuple[int, ...] = field(default_factory=tuple)
    message: str = ""

    @property
    def missing_ids(self) -> Tuple[int, ...]:
        accounted = {reservation.id for reservation in self.updated}
        accounted.update(item.reservation_id for item in self.errors)
        return tuple(rid for rid in self.requested_ids if rid not in accounted)

    @property
    def shortfall(self) -> int:
        return max(len(self.requested_ids) - self.updated_count, 0)

    @property
    def is_complete(self) -> bool:
        return self.success and not self.errors and not self.missing_ids
