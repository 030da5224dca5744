"""Payment proof attached to a cost-bearing reservation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class PaymentProof:
    id: int
    reservation_id: int
    file_url: str
    original_file_name: str = ""
    mime_type: str = ""
    file_size: int = 0
    uploaded_by: Optional[int] = None
    created_at: Optional[datetime] = None
