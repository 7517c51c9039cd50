# src/pocket_todo/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.reminders import ReminderScheduler
from ..tasks.task_models import TaskFilter
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings-like object (config.Settings or a test SimpleNamespace).
    settings: Any

    task_store: TaskStore
    reminders: ReminderScheduler | None = None

    # Filter used by a bare /list.
    current_filter: TaskFilter = TaskFilter.ALL

    # Held by connectors around command handling.
    lock: threading.RLock = field(default_factory=threading.RLock)
