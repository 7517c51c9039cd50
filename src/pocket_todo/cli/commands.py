# src/pocket_todo/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import Priority, Task, TaskFilter

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, str], str]
CommandHandler3 = Callable[[AppState, str, CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command rest of line".
        Returns a reply string or None if not a command.

        Handlers get the raw text after the command name (leading
        whitespace removed), so free text keeps its spacing.
        """
        if not line.startswith("/"):
            return None

        body = line[1:]
        name, _, rest = body.partition(" ")
        name = name.strip().lower()
        if not name:
            return "Empty command. Use /help to list available commands."

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        rest = rest.lstrip()

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, rest, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, rest)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def parse_due(raw: str) -> datetime | None:
    """YYYY-MM-DD or YYYY-MM-DDTHH:MM; None if unparsable."""
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def parse_add_args(rest: str) -> tuple[str, Priority, datetime | None]:
    """
    Split "/add" input into (description, priority, due_date).

    Trailing "!high|!medium|!low" and "@YYYY-MM-DD[THH:MM]" tokens are options;
    everything before them is the description.
    """
    priority = Priority.MEDIUM
    due: datetime | None = None
    text = rest.rstrip()

    while text:
        head, _, last = text.rpartition(" ")
        if last.startswith("!") and last[1:].lower() in {p.value.lower() for p in Priority}:
            priority = Priority.from_raw(last[1:])
        elif last.startswith("@") and parse_due(last[1:]) is not None:
            due = parse_due(last[1:])
        else:
            break
        text = head.rstrip()

    return text, priority, due


def resolve_ref(state: AppState, ref: str) -> Task | None:
    """
    Find a task by 1-based position in the full list ("2") or by unique
    id prefix ("#1a2b"). A bare all-digit ref is always a position; use the
    "#" form for id prefixes that happen to be all digits.
    """
    ref = ref.strip()
    if not ref:
        return None

    tasks = state.task_store.load()

    if ref.startswith("#"):
        prefix = ref[1:].lower()
        if not prefix:
            return None
    elif ref.isdigit():
        pos = int(ref)
        if 1 <= pos <= len(tasks):
            return tasks[pos - 1]
        return None
    else:
        prefix = ref.lower()

    matches = [t for t in tasks if str(t.id).startswith(prefix)]
    return matches[0] if len(matches) == 1 else None


def format_task(pos: int, task: Task) -> str:
    mark = "x" if task.is_completed else " "
    extra = [task.priority.value]
    if task.due_date is not None:
        extra.append(f"due {task.due_date:%Y-%m-%d}")
    return f"{pos}. [{mark}] {task.description}  ({', '.join(extra)})  #{task.short_id()}"


# ---- commands ----


def cmd_help(state: AppState, rest: str) -> str:
    return registry.build_help()


def cmd_add(state: AppState, rest: str) -> str:
    """
    /add Buy milk
    /add Pay bills !high @2026-10-20
    """
    description, priority, due = parse_add_args(rest)
    task = state.task_store.add(description, priority=priority, due_date=due)
    if task is None:
        if description.strip():
            return "Could not save the task list; see the log."
        return "Nothing to add. Usage: /add <text> [!high|!medium|!low] [@YYYY-MM-DD]"

    reply = f"Added #{task.short_id()}: {task.description}"
    if task.due_date is not None and state.reminders is not None:
        scheduled = any(r.task_id == task.id for r in state.reminders.pending())
        reply += " (reminder set)" if scheduled else " (due date passed, no reminder)"
    return reply


def cmd_done(state: AppState, rest: str) -> str:
    """/done <n|id>  -> toggle completion"""
    task = resolve_ref(state, rest)
    if task is None:
        return f"No such task: {rest.strip() or '(empty)'}"

    updated = state.task_store.toggle_completion(task.id)
    if updated is None:
        return f"No such task: {rest.strip()}"

    if state.reminders is not None:
        if updated.is_completed:
            state.reminders.cancel(updated.id)
        else:
            state.reminders.schedule(updated)

    status = "completed" if updated.is_completed else "not completed"
    return f"#{updated.short_id()} {updated.description}: {status}"


def cmd_rm(state: AppState, rest: str) -> str:
    """/rm <n|id>  -> delete a task"""
    task = resolve_ref(state, rest)
    if task is None or not state.task_store.remove(task.id):
        return f"No such task: {rest.strip() or '(empty)'}"

    if state.reminders is not None:
        state.reminders.cancel(task.id)
    return f"Removed #{task.short_id()}: {task.description}"


def cmd_list(state: AppState, rest: str) -> str:
    """
    /list              -> current filter
    /list all|completed|incomplete
    """
    if rest.strip():
        state.current_filter = TaskFilter.from_raw(rest)

    tasks = state.task_store.load()
    positions = {t.id: i for i, t in enumerate(tasks, start=1)}
    shown = state.task_store.filter(tasks, state.current_filter)

    if not shown:
        return f"No tasks ({state.current_filter.value})."

    lines = [f"Tasks ({state.current_filter.value}):"]
    lines.extend(format_task(positions[t.id], t) for t in shown)
    return "\n".join(lines)


def cmd_exit(state: AppState, rest: str) -> str:
    # The console handles /exit itself; other connectors have nothing to stop.
    return "Nothing to exit here."


def cmd_clear(state: AppState, rest: str) -> str:
    n = state.task_store.count()
    state.task_store.clear()
    if state.reminders is not None:
        state.reminders.reschedule_all([])
    return f"Cleared {n} task(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <text> [!high|!medium|!low] [@YYYY-MM-DD[THH:MM]]."
)
registry.register("done", cmd_done, help_text="Toggle completion: /done <n|#id>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n|#id>.", aliases=["del", "delete"])
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|completed|incomplete].", aliases=["ls"]
)
registry.register("clear", cmd_clear, help_text="Delete all tasks.")
registry.register("exit", cmd_exit, help_text="Quit the console.", aliases=["quit"])
