"""Availability query and computed result."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class AvailabilityConfiguration:
    """Which facility unit and which dates a caller wants to inspect."""

    facility_unit_id: int
    initial_date: date
    final_date: Optional[date] = None
    weekdays: Optional[Tuple[int, ...]] = None

    def to_query(self) -> dict:
        params = {
            'subScenarioId': self.facility_unit_id,
            'initialDate': self.initial_date.isoformat(),
        }
        if self.final_date is not None:
            params['finalDate'] = self.final_date.isoformat()
            # Weekdays only narrow a range.
            if self.weekdays:
                params['weekdays'] = ",".join(str(day) for day in sorted(set(self.weekdays)))
        return params


@dataclass(frozen=True)
class SlotAvailability:
    id: int
    start_time: str
    end_time: str
    is_available_across_all_dates: bool


@dataclass(frozen=True)
class AvailabilityStats:
    total_dates: int
    total_timeslots: int
    total_slots: int
    available_slots: int
    occupied_slots: int
    global_availability_percentage: float
    dates_with_full_availability: int
    dates_with_no_availability: int


@dataclass(frozen=True)
class SimplifiedAvailabilityResult:
    """Per-slot availability across every date of a configuration."""

    facility_unit_id: int
    calculated_dates: Tuple[date, ...]
    time_slots: List[SlotAvailability]
    stats: AvailabilityStats
    queried_at: Optional[datetime] = None
    request: Optional[AvailabilityConfiguration] = field(default=None, compare=False)

    def available_slot_ids(self) -> List[int]:
        return [slot.id for slot in self.time_slots if slot.is_available_across_all_dates]

    def slot(self, slot_id: int) -> Optional[SlotAvailability]:
        for slot in self.time_slots:
            if slot.id == slot_id:
                return slot
        return None
