"""Shared fakes and utilities for unit tests."""

from __future__ import annotations
from tracking import t

from typing import Any, Dict, List, Tuple


class DummyLogger:
    """Lightweight stand-in for ``logging.Logger`` that records calls."""

    def __init__(self) -> None:
        t('tests.helpers.DummyLogger.__init__')
        self.records: List[Tuple[str, Tuple[Any, ...], Dict[str, Any]]] = []
        # ``entries`` is kept for compatibility with existing assertions.
        self.entries = self.records

    def _record(self, level: str, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger._record')
        self.records.append((level, args, kwargs))

    def debug(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.debug')
        self._record("debug", *args, **kwargs)

    def info(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.info')
        self._record("info", *args, **kwargs)

    def warning(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.warning')
        self._record("warning", *args, **kwargs)

    def error(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.error')
        self._record("error", *args, **kwargs)

    def critical(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.critical')
        self._record("critical", *args, **kwargs)

    def exception(self, *args: Any, **kwargs: Any) -> None:
        t('tests.helpers.DummyLogger.exception')
        self._record("exception", *args, **kwargs)

    @property
    def messages(self) -> List[Tuple[str, Any]]:
        """Return formatted messages for quick assertions."""
        t('tests.helpers.DummyLogger.messages')

        formatted: List[Tuple[str, Any]] = []
        for level, args, kwargs in self.records:
            message: Any = kwargs.get("msg")
            if args:
                template = args[0]
                if isinstance(template, str) and len(args) > 1:
                    try:
                        message = template % args[1:]
                    except (TypeError, ValueError):
                        message = template
                else:
                    message = template
            formatted.append((level, message))
        return formatted

    def clear(self) -> None:
        t('tests.helpers.DummyLogger.clear')
        self.records.clear()

    def last(self, level: str | None = None) -> Tuple[str, Tuple[Any, ...], Dict[str, Any]] | None:
        """Return the most recent record, optionally filtered by level."""
        t('tests.helpers.DummyLogger.last')

        if not self.records:
            return None
        if level is None:
            return self.records[-1]
        for entry in reversed(self.records):
            if entry[0] == level:
                return entry
        return None


def make_settings(**overrides: Any):
    """Settings snapshot with test-friendly defaults."""
    t('tests.helpers.make_settings')

    from infrastructure.settings import load_settings

    settings = load_settings({
        "RESERVATIONS_API_URL": "http://api.test",
        "FACILITY_TIMEZONE": "America/Bogota",
        "LOG_DIRECTORY": "logs/test",
    })
    if overrides:
        from dataclasses import replace

        settings = replace(settings, **overrides)
    return settings


def make_reservation(**overrides: Any):
    """Build a confirmed-by-default single-date reservation for tests."""
    t('tests.helpers.make_reservation')

    from datetime import date

    from reservations.models.reservation import (
        FacilitySnapshot,
        Reservation,
        ReservationKind,
        ReservationState,
        ScenarioSnapshot,
        TimeSlot,
        UserSnapshot,
    )

    fields: Dict[str, Any] = {
        "id": 1,
        "kind": ReservationKind.SINGLE,
        "facility_unit_id": 10,
        "user_id": 100,
        "start_date": date(2025, 3, 10),
        "state": ReservationState.PENDING,
        "state_id": 1,
        "timeslots": (TimeSlot(id=5, start_time="08:00", end_time="09:00"),),
        "facility": FacilitySnapshot(
            id=10,
            name="Cancha Sintetica",
            scenario=ScenarioSnapshot(id=3, name="Parque Central"),
        ),
        "user": UserSnapshot(id=100, first_name="Ana", last_name="Rojas", email="ana@example.com"),
    }
    fields.update(overrides)
    return Reservation(**fields)


def reservation_payload(**overrides: Any) -> Dict[str, Any]:
    """Wire-format reservation record as the service returns it."""
    t('tests.helpers.reservation_payload')

    payload: Dict[str, Any] = {
        "id": 1,
        "type": "SINGLE",
        "subScenarioId": 10,
        "userId": 100,
        "initialDate": "2025-03-10",
        "finalDate": None,
        "weekDays": None,
        "comments": None,
        "reservationStateId": 1,
        "reservationState": {"id": 1, "name": "PENDIENTE"},
        "totalInstances": 1,
        "timeslots": [{"id": 5, "startTime": "08:00:00", "endTime": "09:00:00"}],
        "subScenario": {
            "id": 10,
            "name": "Cancha Sintetica",
            "hasCost": False,
            "scenario": {"id": 3, "name": "Parque Central"},
        },
        "user": {"id": 100, "firstName": "Ana", "lastName": "Rojas", "email": "ana@example.com"},
        "createdAt": "2025-03-01T12:00:00Z",
    }
    payload.update(overrides)
    return payload
