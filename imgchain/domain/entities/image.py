from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ImageEntity:
    id: str
    width: int
    height: int
    channels: int  # 1 for grayscale, 3 for RGB
    mime_type: str
    created_at: datetime
    original_filename: str | None = None
    file_size: int | None = None  # bytes
