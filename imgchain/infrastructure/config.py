from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    log_level: str = "INFO"
    max_upload_bytes: int = 20 * 1024 * 1024
    max_sessions: int = 64
    default_ext: str = "png"
    capability_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            env=os.getenv("ENV", "development"),
            log_level=os.getenv("IMGCHAIN_LOG_LEVEL", "INFO").upper(),
            max_upload_bytes=int(os.getenv("IMGCHAIN_MAX_UPLOAD_BYTES", str(20 * 1024 * 1024))),
            max_sessions=int(os.getenv("IMGCHAIN_MAX_SESSIONS", "64")),
            default_ext=os.getenv("IMGCHAIN_DEFAULT_EXT", "png").lower().lstrip("."),
            capability_timeout=float(os.getenv("IMGCHAIN_CAPABILITY_TIMEOUT", "10")),
        )
