# src/pocket_todo/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class Priority(StrEnum):
    """Task priority. Values are the persisted spelling."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def from_raw(cls, raw: str | None) -> Priority:
        """Parse user or stored input case-insensitively; unknown -> MEDIUM."""
        if not raw:
            return cls.MEDIUM
        s = raw.strip().lower()
        for p in cls:
            if p.value.lower() == s:
                return p
        return cls.MEDIUM


class TaskFilter(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        s = raw.strip().lower()
        aliases = {
            "done": cls.COMPLETED,
            "completed": cls.COMPLETED,
            "open": cls.INCOMPLETE,
            "todo": cls.INCOMPLETE,
            "incomplete": cls.INCOMPLETE,
        }
        return aliases.get(s, cls.ALL)


@dataclass(slots=True)
class Task:
    description: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    is_completed: bool = False
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None  # date-time; reminders use the date part only

    def short_id(self) -> str:
        return str(self.id)[:8]
