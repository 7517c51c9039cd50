# src/pocket_todo/tasks/task_store.py

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterable
from datetime import datetime

from ..core.ports import PreferenceStore, ReminderPort
from .task_codec import TaskDecodeError, TaskEncodeError, decode_tasks, encode_tasks
from .task_models import Priority, Task, TaskFilter

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "Tasks"


def filter_tasks(tasks: Iterable[Task], predicate: TaskFilter) -> list[Task]:
    """Read-side projection. Keeps relative order; never mutates or persists."""
    if predicate == TaskFilter.COMPLETED:
        return [t for t in tasks if t.is_completed]
    if predicate == TaskFilter.INCOMPLETE:
        return [t for t in tasks if not t.is_completed]
    return list(tasks)


class TaskStore:
    """
    Task list persisted as one blob under a single preference key.

    Every mutation is a full cycle: load the whole list, change it in memory,
    write the whole list back. The blob is the only source of truth; there is
    no cache between calls.

    Failure policy:
    - unreadable blob (absent, empty, corrupt) loads as an empty list
    - a list that cannot be encoded is persisted as the empty value, and
      save() reports False so add() does not hand out an unsaved task
    - blank descriptions and unknown ids are no-ops

    Thread-safety:
    - one re-entrant lock serializes every read-modify-write cycle, so
      concurrent callers never lose each other's updates within a process
    """

    def __init__(
        self,
        prefs: PreferenceStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        reminders: ReminderPort | None = None,
    ) -> None:
        self._prefs = prefs
        self._key = key
        self._reminders = reminders
        self._lock = threading.RLock()
        logger.info("TaskStore ready key=%s total=%s", self._key, self.count())

    # ---- persistence ----

    def load(self) -> list[Task]:
        with self._lock:
            blob = self._prefs.get(self._key)
            if not blob:
                return []
            try:
                return decode_tasks(blob)
            except TaskDecodeError as e:
                logger.warning("Stored task list unreadable (%s); treating as empty.", e)
                return []

    def save(self, tasks: list[Task]) -> bool:
        """
        Overwrite the stored list. Returns False if encoding failed, in which
        case the empty value was stored instead (the old list is gone).
        """
        with self._lock:
            try:
                blob = encode_tasks(tasks)
            except TaskEncodeError:
                logger.exception("Failed to encode task list; storing empty value.")
                self._prefs.set(self._key, "")
                return False
            self._prefs.set(self._key, blob)
            return True

    # ---- mutations ----

    def add(
        self,
        description: str,
        priority: Priority = Priority.MEDIUM,
        due_date: datetime | None = None,
    ) -> Task | None:
        """
        Append a new task and persist.

        Returns None if the description is blank (nothing written) or if the
        list could not be persisted (no reminder is scheduled). The text is
        stored exactly as given.
        """
        if not description or not description.strip():
            logger.debug("Rejected task with blank description.")
            return None

        if not isinstance(priority, Priority):
            priority = Priority.from_raw(priority)
        task = Task(description=description, priority=priority, due_date=due_date)
        with self._lock:
            tasks = self.load()
            tasks.append(task)
            if not self.save(tasks):
                return None

        logger.debug(
            "Task added id=%s priority=%s due=%s", task.id, task.priority.value, task.due_date
        )
        self._schedule_reminder(task)
        return task

    def toggle_completion(self, task_id: uuid.UUID) -> Task | None:
        """Flip is_completed in place. Returns the updated task, or None if unknown."""
        with self._lock:
            tasks = self.load()
            for task in tasks:
                if task.id == task_id:
                    task.is_completed = not task.is_completed
                    self.save(tasks)
                    logger.debug("Task %s completed=%s", task_id, task.is_completed)
                    return task
        logger.debug("toggle_completion: no task id=%s", task_id)
        return None

    def remove(self, task_id: uuid.UUID) -> bool:
        """Delete every task with this id. Returns False (nothing written) if none matched."""
        with self._lock:
            tasks = self.load()
            kept = [t for t in tasks if t.id != task_id]
            if len(kept) == len(tasks):
                logger.debug("remove: no task id=%s", task_id)
                return False
            self.save(kept)
        logger.debug("Task removed id=%s", task_id)
        return True

    def clear(self) -> None:
        self.save([])
        logger.info("Task list cleared key=%s", self._key)

    # ---- read side ----

    @staticmethod
    def filter(tasks: Iterable[Task], predicate: TaskFilter) -> list[Task]:
        return filter_tasks(tasks, predicate)

    def get(self, task_id: uuid.UUID) -> Task | None:
        for task in self.load():
            if task.id == task_id:
                return task
        return None

    def count(self) -> int:
        return len(self.load())

    # ---- collaborators ----

    def _schedule_reminder(self, task: Task) -> None:
        if self._reminders is None:
            return
        try:
            self._reminders.schedule(task)
        except Exception:
            logger.exception("Scheduling reminder failed task_id=%s", task.id)
