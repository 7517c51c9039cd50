# src/pocket_todo/tasks/reminders.py

from __future__ import annotations

"""
Due-date reminders.

- builds a one-shot reminder for an incomplete task with a due date,
- keeps pending reminders keyed by task id (re-scheduling replaces),
- a small polling loop hands due reminders to an injected notifier port.

Delivery is fire-and-forget: each reminder is attempted once and dropped.
"""

import asyncio
import logging
import threading
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, time as dtime

from ..core.ports import Notifier
from .task_models import Task

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Reminder:
    task_id: uuid.UUID
    title: str
    body: str
    fire_at: datetime  # naive local time


def parse_time_of_day(raw: str | None, default: dtime = dtime(0, 0)) -> dtime:
    """Parse "HH:MM"; anything unparsable gives default."""
    if not raw or not raw.strip():
        return default
    try:
        hh, mm = raw.strip().split(":", 1)
        return dtime(int(hh), int(mm))
    except ValueError:
        return default


def build_reminder(task: Task, time_of_day: dtime = dtime(0, 0)) -> Reminder | None:
    """
    Convert a task into a reminder, or None if it should not get one.

    Only the calendar date of due_date is used; the reminder fires at
    time_of_day on that date (local time).
    """
    if task.is_completed or task.due_date is None:
        return None

    due = task.due_date
    if due.tzinfo is not None:
        due = due.astimezone().replace(tzinfo=None)

    return Reminder(
        task_id=task.id,
        title="Task due",
        body=task.description,
        fire_at=datetime.combine(due.date(), time_of_day),
    )


class ReminderScheduler:
    """
    In-process pending-reminder table.

    Thread-safe: the store schedules from the console thread while the
    delivery loop pops from its own event loop thread.
    """

    def __init__(self, *, time_of_day: dtime = dtime(0, 0)) -> None:
        self._time_of_day = time_of_day
        self._pending: dict[uuid.UUID, Reminder] = {}
        self._lock = threading.Lock()

    def schedule(self, task: Task, now: datetime | None = None) -> Reminder | None:
        reminder = build_reminder(task, self._time_of_day)
        if reminder is None:
            return None

        now = now or datetime.now()
        if reminder.fire_at <= now:
            # One-shot calendar triggers in the past never fire.
            logger.debug("Reminder for task %s is in the past (%s); skipped", task.id, reminder.fire_at)
            return None

        with self._lock:
            self._pending[task.id] = reminder
        logger.info("Reminder scheduled task_id=%s at=%s", task.id, reminder.fire_at)
        return reminder

    def cancel(self, task_id: uuid.UUID) -> bool:
        with self._lock:
            removed = self._pending.pop(task_id, None)
        if removed is not None:
            logger.info("Reminder cancelled task_id=%s", task_id)
        return removed is not None

    def pending(self) -> list[Reminder]:
        with self._lock:
            return sorted(self._pending.values(), key=lambda r: r.fire_at)

    def pop_due(self, now: datetime | None = None) -> list[Reminder]:
        now = now or datetime.now()
        with self._lock:
            due = [r for r in self._pending.values() if r.fire_at <= now]
            for r in due:
                del self._pending[r.task_id]
        due.sort(key=lambda r: r.fire_at)
        return due

    def reschedule_all(self, tasks: Iterable[Task], now: datetime | None = None) -> int:
        """Rebuild the pending table from the stored tasks (e.g. on startup)."""
        with self._lock:
            self._pending.clear()
        n = 0
        for task in tasks:
            if self.schedule(task, now=now) is not None:
                n += 1
        logger.info("Reminders rescheduled: %d", n)
        return n


async def deliver_due(scheduler: ReminderScheduler, notifier: Notifier, now: datetime | None = None) -> int:
    """Deliver every due reminder once. Returns how many were handed to the notifier."""
    sent = 0
    for reminder in scheduler.pop_due(now):
        try:
            await notifier.notify(
                key=str(reminder.task_id),
                title=reminder.title,
                body=reminder.body,
            )
            sent += 1
        except Exception:
            logger.exception("Reminder delivery failed task_id=%s", reminder.task_id)
    return sent


async def run_reminder_loop(
        scheduler: ReminderScheduler,
        notifier: Notifier,
        *,
        interval_seconds: float = 15.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling loop.

    Every interval_seconds, pop due reminders and pass them to notifier.notify(...).
    Stops when stop_event is set, or when the coroutine is cancelled.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        await deliver_due(scheduler, notifier)

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)
        except asyncio.TimeoutError:
            pass


@dataclass(slots=True)
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal reminder loop stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_reminders_in_background(
    scheduler: ReminderScheduler,
    notifier: Notifier,
    *,
    interval_seconds: float = 15.0,
) -> ReminderBackgroundRunner | None:
    """
    Run the reminder loop on its own event loop in a daemon thread,
    so the blocking console REPL can keep the main thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_reminder_loop(
                    scheduler,
                    notifier,
                    interval_seconds=interval_seconds,
                    stop_event=stop_event,
                )
            )
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="reminders", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder background thread started (interval=%ss).", interval_seconds)
    return ReminderBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
