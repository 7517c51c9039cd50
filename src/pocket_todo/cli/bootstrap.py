# src/pocket_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the preference store, task store and reminder scheduler into AppState,
- rebuilds pending reminders from the stored tasks.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..storage.prefs import SQLitePreferenceStore
from ..tasks.reminders import ReminderScheduler, parse_time_of_day
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.prefs_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    reminders: ReminderScheduler | None = None
    if getattr(settings, "reminders_enabled", True):
        reminders = ReminderScheduler(
            time_of_day=parse_time_of_day(getattr(settings, "reminder_time", None))
        )

    task_store = TaskStore(
        SQLitePreferenceStore(settings.prefs_db_path),
        key=settings.storage_key,
        reminders=reminders,
    )

    if reminders is not None:
        reminders.reschedule_all(task_store.load())

    return AppState(settings=settings, task_store=task_store, reminders=reminders)
