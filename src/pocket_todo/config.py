# src/pocket_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Everything has a default; the app runs with an empty environment.
- Components receive settings by injection; get_settings() is for entrypoints.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


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

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Storage (ignored by git) ----
    data_dir: Path
    prefs_db_path: Path
    storage_key: str

    # ---- Reminders ----
    reminders_enabled: bool
    reminder_time: str
    reminder_poll_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo"))

        return Settings(
            app_name=_env(_k("APP_NAME"), "todo"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), True),
            data_dir=data_dir,
            prefs_db_path=_env_path(_k("PREFS_DB_PATH"), data_dir / "prefs.sqlite3"),
            storage_key=_env(_k("STORAGE_KEY"), "Tasks").strip() or "Tasks",
            reminders_enabled=_env_bool(_k("REMINDERS_ENABLED"), True),
            reminder_time=_env(_k("REMINDER_TIME"), "00:00"),
            reminder_poll_seconds=_env_float(_k("REMINDER_POLL_SECONDS"), 15.0),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
