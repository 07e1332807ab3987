# src/work_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Everything local lives under a gitignored data dir.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_scheduler import MIN_TICK_INTERVAL_SECONDS

ENV_PREFIX = "WORK_TRACKER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Ticker ----
    ticker_enabled: bool
    tick_interval_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    snapshot_path: Path
    export_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "work-tracker") or "work-tracker"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        ticker_enabled = _env_bool(_k("TICKER_ENABLED"), True)
        tick_interval_seconds = max(
            MIN_TICK_INTERVAL_SECONDS, _env_float(_k("TICK_INTERVAL_SECONDS"), 1.0)
        )

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/work_tracker"))
        snapshot_path = _env_path(_k("SNAPSHOT_PATH"), data_dir / "tasks.json")
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir / "exports")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            ticker_enabled=ticker_enabled,
            tick_interval_seconds=tick_interval_seconds,
            data_dir=data_dir,
            snapshot_path=snapshot_path,
            export_dir=export_dir,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
