"""Configuration helpers for backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_ROSTER_PATH = Path(__file__).with_name("penguins.json")
DEFAULT_CACHE_TTL_SECONDS = 600.0


@dataclass(frozen=True)
class BackendSettings:
    roster_path: Path
    database_url: str | None
    host: str
    port: int
    cache_ttl_seconds: float
    log_level: str
    json_logs: bool


def _bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> BackendSettings:
    port_raw = os.getenv("PENGUINDAYCARE_PORT", "8000")
    ttl_raw = os.getenv("PENGUINDAYCARE_CACHE_TTL_SECONDS", str(DEFAULT_CACHE_TTL_SECONDS))
    roster_raw = os.getenv("PENGUINDAYCARE_ROSTER_PATH")
    return BackendSettings(
        roster_path=Path(roster_raw) if roster_raw else DEFAULT_ROSTER_PATH,
        database_url=os.getenv("PENGUINDAYCARE_DATABASE_URL") or None,
        host=os.getenv("PENGUINDAYCARE_HOST", "127.0.0.1"),
        port=int(port_raw),
        cache_ttl_seconds=float(ttl_raw),
        log_level=os.getenv("PENGUINDAYCARE_LOG_LEVEL", "INFO").upper(),
        json_logs=_bool(os.getenv("PENGUINDAYCARE_JSON_LOGS")),
    )
