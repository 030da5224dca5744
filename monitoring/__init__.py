"""Availability monitoring helpers."""

from .availability_poller import AvailabilityChange, AvailabilityPoller, PollSnapshot

__all__ = ["AvailabilityChange", "AvailabilityPoller", "PollSnapshot"]
