# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from pocket_todo.core.state import AppState
from pocket_todo.storage.prefs import InMemoryPreferenceStore, SQLitePreferenceStore
from pocket_todo.tasks.reminders import ReminderScheduler
from pocket_todo.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and AppState.

    A SimpleNamespace rather than real config keeps tests isolated from
    the environment and any local .env file.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=tmp_path / "data",
        prefs_db_path=tmp_path / "data" / "prefs.sqlite3",
        storage_key="Tasks",
        reminders_enabled=True,
        reminder_time="09:00",
        reminder_poll_seconds=0.01,
    )


@pytest.fixture()
def prefs() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture()
def store(prefs: InMemoryPreferenceStore) -> TaskStore:
    return TaskStore(prefs)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired with a real SQLite preference store, because the
    persistence path is part of what we want to test.
    """
    reminders = ReminderScheduler()
    task_store = TaskStore(
        SQLitePreferenceStore(settings.prefs_db_path),
        key=settings.storage_key,
        reminders=reminders,
    )
    return AppState(settings=settings, task_store=task_store, reminders=reminders)
