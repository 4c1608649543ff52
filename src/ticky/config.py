"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    # Seconds Ticky "thinks" before answering, per difficulty.
    pro_delay: float = 0.8
    friendly_delay: float = 0.5


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else default


def load_settings() -> Settings:
    return Settings(
        host=os.environ.get("TICKY_HOST", "0.0.0.0"),
        port=int(os.environ.get("TICKY_PORT", "8000")),
        log_level=(os.environ.get("TICKY_LOG_LEVEL", "INFO") or "INFO").upper(),
        pro_delay=max(0.0, _env_float("TICKY_PRO_DELAY", 0.8)),
        friendly_delay=max(0.0, _env_float("TICKY_FRIENDLY_DELAY", 0.5)),
    )
