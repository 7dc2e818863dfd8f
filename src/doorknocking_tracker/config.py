from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

BUNDLED_PROPERTIES_CSV = Path(__file__).resolve().parent / "data" / "properties.csv"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = str(raw).strip().lower()
    if v in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return default
    return str(raw).strip()


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from ``DKT_*`` environment variables.

    Defaults run the tracker fully offline: demo identity provider, demo
    geocoder and the bundled property dataset.
    """

    state_db: str
    properties_csv: Optional[str]
    export_dir: str
    strict_csv: bool
    numeric_default: int
    geocoder: str
    nominatim_url: str
    identity: str
    log_level: str
    log_json: bool

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            state_db=_env_str("DKT_STATE_DB", "./doorknocking.sqlite"),
            properties_csv=_env_str(
                "DKT_PROPERTIES_CSV", str(BUNDLED_PROPERTIES_CSV)
            ),
            export_dir=_env_str("DKT_EXPORT_DIR", "./exports"),
            strict_csv=_env_bool("DKT_STRICT_CSV", True),
            numeric_default=_env_int("DKT_NUMERIC_DEFAULT", 0),
            geocoder=_env_str("DKT_GEOCODER", "demo").lower(),
            nominatim_url=_env_str(
                "DKT_NOMINATIM_URL", "https://nominatim.openstreetmap.org/reverse"
            ),
            identity=_env_str("DKT_IDENTITY", "demo").lower(),
            log_level=_env_str("DKT_LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("DKT_LOG_JSON", False),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def reset_settings_cache() -> None:
    """Test helper to force env re-read."""

    get_settings.cache_clear()
