"""Availability expansion, statistics and resolution."""

from .expansion import expand_dates, weekday_ordinal

__all__ = ["expand_dates", "weekday_ordinal"]
