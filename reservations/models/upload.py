"""In-memory file handed to an upload endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class UploadFile:
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def as_multipart(self) -> Tuple[str, bytes, str]:
        """Return the ``(filename, content, content_type)`` tuple httpx expects."""
        return (self.filename, self.content, self.content_type)
