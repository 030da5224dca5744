"""Lookup entries for filter drop-downs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CatalogItem:
    id: int
    name: str
    parent_id: Optional[int] = None
