"""Reusable polling helper for facility-unit availability."""

from __future__ import annotations
from tracking import t

import asyncio
import copy
import inspect
from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from reservations.models.availability import AvailabilityConfiguration


# unit id -> sorted available slot ids, or {'error': message}
AvailabilityData = Dict[int, Any]


@dataclass
class AvailabilityChange:
    """Represents differences between two availability snapshots."""

    added: List[int] = field(default_factory=list)
    removed: List[int] = field(default_factory=list)
    error: Optional[str] = None

    def has_changes(self) -> bool:
        t('monitoring.availability_poller.AvailabilityChange.has_changes')
        return bool(self.added or self.removed or self.error)


@dataclass
class PollSnapshot:
    """Container for poll results and detected changes."""

    timestamp: datetime
    results: AvailabilityData
    previous: AvailabilityData
    changes: Dict[int, AvailabilityChange]


class AvailabilityPoller:
    """Polls the availability resolver for a set of configurations and detects changes."""

    def __init__(
        self,
        resolver,
        configurations: Sequence[AvailabilityConfiguration],
        *,
        logger=None,
    ) -> None:
        t('monitoring.availability_poller.AvailabilityPoller.__init__')
        self._resolver = resolver
        self._configurations = list(configurations)
        self._logger = logger or logging.getLogger('AvailabilityPoller')
        self._previous: AvailabilityData = {}

    @property
    def previous(self) -> AvailabilityData:
        t('monitoring.availability_poller.AvailabilityPoller.previous')
        return copy.deepcopy(self._previous)

    async def poll(self) -> PollSnapshot:
        t('monitoring.availability_poller.AvailabilityPoller.poll')
        return self._apply(await self._fetch())

    async def run(
        self,
        stop_event: asyncio.Event,
        interval: float,
        on_change: Optional[Callable[[PollSnapshot], Any]] = None,
    ) -> int:
        """Poll until ``stop_event`` is set; returns the number of snapshots applied.

        A fetch that completes after the caller left is discarded. The
        request itself is not cancelled.
        """

        t('monitoring.availability_poller.AvailabilityPoller.run')
        applied = 0
        while not stop_event.is_set():
            raw_results = await self._fetch()
            if stop_event.is_set():
                self._logger.debug("Discarding availability fetched after stop")
                break

            snapshot = self._apply(raw_results)
            applied += 1
            if snapshot.changes and on_change is not None:
                outcome = on_change(snapshot)
                if inspect.isawaitable(outcome):
                    await outcome

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
        return applied

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _fetch(self) -> AvailabilityData:
        t('monitoring.availability_poller.AvailabilityPoller._fetch')
        results: AvailabilityData = {}
        for config in self._configurations:
            result = await self._resolver.resolve(config)
            if result.ok:
                results[config.facility_unit_id] = result.value.available_slot_ids()
            else:
                results[config.facility_unit_id] = {'error': result.message}
        return results

    def _apply(self, raw_results: AvailabilityData) -> PollSnapshot:
        t('monitoring.availability_poller.AvailabilityPoller._apply')
        is_initial = not self._previous
        normalised_results = self._normalise_snapshot(raw_results)
        previous_normalised = self._normalise_snapshot(self._previous)

        changes: Dict[int, AvailabilityChange] = {}
        if is_initial:
            for unit_id, data in normalised_results.items():
                if isinstance(data, dict) and "error" in data:
                    changes[unit_id] = AvailabilityChange(error=str(data['error']))
        else:
            for unit_id in set(previous_normalised.keys()) | set(normalised_results.keys()):
                change = self._detect_change(
                    previous_normalised.get(unit_id),
                    normalised_results.get(unit_id),
                )
                if change is not None:
                    changes[unit_id] = change

        snapshot = PollSnapshot(
            timestamp=datetime.now(),
            results=copy.deepcopy(normalised_results),
            previous=copy.deepcopy(previous_normalised),
            changes=changes,
        )

        self._previous = normalised_results
        return snapshot

    def _normalise_snapshot(self, snapshot: AvailabilityData) -> AvailabilityData:
        t('monitoring.availability_poller.AvailabilityPoller._normalise_snapshot')
        if not snapshot:
            return {}

        normalised: AvailabilityData = {}
        for unit_id, data in snapshot.items():
            if isinstance(data, dict):
                normalised[unit_id] = data
            else:
                normalised[unit_id] = sorted(set(data))
        return normalised

    def _detect_change(self, old: Any, new: Any) -> Optional[AvailabilityChange]:
        t('monitoring.availability_poller.AvailabilityPoller._detect_change')
        change = AvailabilityChange()
        old_failed = isinstance(old, dict) and "error" in old

        if new is None:
            if old is None:
                return None
            if old_failed:
                change.error = "Availability fetch failed previously"
            else:
                change.removed = list(old)
            return change if change.has_changes() else None

        if isinstance(new, dict) and "error" in new:
            change.error = str(new.get("error"))
            return change

        if old is None or old_failed:
            if old_failed:
                change.error = "Recovered from error"
            change.added = list(new)
            return change if change.has_changes() else None

        old_slots = set(old)
        new_slots = set(new)
        change.added = sorted(new_slots - old_slots)
        change.removed = sorted(old_slots - new_slots)
        return change if change.has_changes() else None
