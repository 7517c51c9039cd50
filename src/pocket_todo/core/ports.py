# src/pocket_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task core.

The store and the reminder loop depend on Protocols instead of concrete
implementations, so storage backends and notification sinks stay swappable
and easy to fake in tests.
"""

import uuid
from typing import Any, Awaitable, Protocol


class PreferenceStore(Protocol):
    """Key-value string store (platform preferences)."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class ReminderPort(Protocol):
    """
    What the store needs from a reminder scheduler.

    The scheduler decides whether a task gets a reminder at all
    (completed tasks and tasks without a due date are skipped).
    """

    def schedule(self, task: Any, now: Any = None) -> Any | None: ...
    def cancel(self, task_id: uuid.UUID) -> bool: ...


class Notifier(Protocol):
    """
    Delivery side of reminders: shows a one-shot notification.

    key is the task id, so a sink can replace or dedupe notifications.
    """

    def notify(self, *, key: str, title: str, body: str) -> Awaitable[None]: ...
