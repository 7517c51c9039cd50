# tests/test_reminders.py

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, time, timedelta

import pytest

from pocket_todo.tasks.reminders import (
    ReminderScheduler,
    build_reminder,
    deliver_due,
    parse_time_of_day,
    run_reminder_loop,
)
from pocket_todo.tasks.task_models import Task

from .fakes import FakeNotifier

NOW = datetime(2026, 10, 18, 12, 0)


def test_build_reminder_truncates_to_date() -> None:
    task = Task(description="Dentist", due_date=datetime(2026, 10, 20, 17, 45))

    reminder = build_reminder(task)
    assert reminder is not None
    assert reminder.task_id == task.id
    assert reminder.body == "Dentist"
    assert reminder.fire_at == datetime(2026, 10, 20, 0, 0)

    at_nine = build_reminder(task, time(9, 0))
    assert at_nine is not None and at_nine.fire_at == datetime(2026, 10, 20, 9, 0)


def test_build_reminder_converts_aware_due_date_to_local() -> None:
    due = datetime(2026, 10, 20, 12, 0, tzinfo=UTC)
    reminder = build_reminder(Task(description="x", due_date=due))
    assert reminder is not None
    assert reminder.fire_at.tzinfo is None
    assert reminder.fire_at.date() == due.astimezone().date()


def test_no_reminder_without_due_date_or_when_completed() -> None:
    assert build_reminder(Task(description="x")) is None
    assert build_reminder(Task(description="x", is_completed=True, due_date=NOW)) is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("09:30", time(9, 30)), (" 7:05 ", time(7, 5)), ("", time(0, 0)), ("25:00", time(0, 0)), ("soon", time(0, 0))],
)
def test_parse_time_of_day(raw: str, expected: time) -> None:
    assert parse_time_of_day(raw) == expected


def test_schedule_replaces_and_cancels() -> None:
    sched = ReminderScheduler()
    task = Task(description="a", due_date=datetime(2026, 11, 1))

    assert sched.schedule(task, now=NOW) is not None
    task.due_date = datetime(2026, 11, 5)
    sched.schedule(task, now=NOW)

    (pending,) = sched.pending()
    assert pending.fire_at == datetime(2026, 11, 5)

    assert sched.cancel(task.id) is True
    assert sched.cancel(task.id) is False
    assert sched.pending() == []


def test_schedule_skips_past_trigger() -> None:
    sched = ReminderScheduler()
    # same calendar day: midnight trigger already passed
    assert sched.schedule(Task(description="today", due_date=NOW), now=NOW) is None
    assert sched.pending() == []


def test_pop_due_is_one_shot() -> None:
    sched = ReminderScheduler()
    soon = Task(description="soon", due_date=datetime(2026, 10, 19))
    later = Task(description="later", due_date=datetime(2026, 10, 25))
    sched.schedule(soon, now=NOW)
    sched.schedule(later, now=NOW)

    due = sched.pop_due(datetime(2026, 10, 19, 0, 1))
    assert [r.task_id for r in due] == [soon.id]
    assert sched.pop_due(datetime(2026, 10, 19, 0, 2)) == []
    assert [r.task_id for r in sched.pending()] == [later.id]


def test_reschedule_all_skips_completed() -> None:
    sched = ReminderScheduler()
    tasks = [
        Task(description="a", due_date=datetime(2026, 10, 30)),
        Task(description="b", due_date=datetime(2026, 10, 30), is_completed=True),
        Task(description="c"),
    ]
    assert sched.reschedule_all(tasks, now=NOW) == 1
    assert [r.task_id for r in sched.pending()] == [tasks[0].id]


@pytest.mark.asyncio
async def test_deliver_due_failure_is_dropped() -> None:
    sched = ReminderScheduler()
    ok = Task(description="ok", due_date=datetime(2026, 10, 19))
    bad = Task(description="bad", due_date=datetime(2026, 10, 19))
    sched.schedule(ok, now=NOW)
    sched.schedule(bad, now=NOW)

    notifier = FakeNotifier(fail_keys={str(bad.id)})
    sent = await deliver_due(sched, notifier, now=datetime(2026, 10, 20))

    assert sent == 1
    assert [n.body for n in notifier.sent] == ["ok"]
    assert sched.pending() == []


@pytest.mark.asyncio
async def test_loop_delivers_due_reminder_once() -> None:
    sched = ReminderScheduler()
    # Scheduled "yesterday" for today's midnight, so it is already due.
    task = Task(description="ping", due_date=datetime.now())
    assert sched.schedule(task, now=datetime.now() - timedelta(days=1)) is not None

    notifier = FakeNotifier()
    stop = asyncio.Event()
    runner = asyncio.create_task(
        run_reminder_loop(sched, notifier, interval_seconds=0.01, stop_event=stop)
    )

    await asyncio.sleep(0.05)
    stop.set()
    await asyncio.wait_for(runner, timeout=1.0)

    assert len(notifier.sent) == 1
    assert notifier.sent[0].key == str(task.id)
    assert notifier.sent[0].body == "ping"
