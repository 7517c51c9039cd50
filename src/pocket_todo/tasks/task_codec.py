# src/pocket_todo/tasks/task_codec.py

from __future__ import annotations

"""
Blob codec for the task list.

The whole list is stored as one UTF-8 JSON array:

    [{"id": "E621E1F8-C36C-495A-93FC-0C247A3E6E5F",
      "description": "Buy milk",
      "isCompleted": false,
      "priority": "Medium",
      "dueDate": "2026-10-20T00:00:00"}]

Decoding is all-or-nothing: one bad record fails the whole blob.
`priority` and `dueDate` are optional so blobs written before they existed
still decode.
"""

import json
import logging
import math
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from .task_models import Priority, Task

logger = logging.getLogger(__name__)

# Numeric dates are seconds since this instant (the reference-date encoding
# used by blobs written by the mobile app).
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=UTC)


class TaskDecodeError(ValueError):
    """Persisted blob is malformed or does not match the task schema."""


class TaskEncodeError(ValueError):
    """Task list could not be serialized."""


def _require(rec: dict[str, Any], key: str, typ: type, index: int) -> Any:
    if key not in rec:
        raise TaskDecodeError(f"record {index}: missing {key!r}")
    val = rec[key]
    # bool is a subclass of int; keep the check strict in both directions.
    if type(val) is not typ:
        raise TaskDecodeError(f"record {index}: {key!r} must be {typ.__name__}")
    return val


def _decode_due_date(raw: Any, index: int) -> datetime | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise TaskDecodeError(f"record {index}: bad dueDate")
    if isinstance(raw, (int, float)):
        if not math.isfinite(raw):
            raise TaskDecodeError(f"record {index}: dueDate is not finite")
        try:
            return REFERENCE_DATE + timedelta(seconds=float(raw))
        except (OverflowError, ValueError) as e:
            raise TaskDecodeError(f"record {index}: dueDate out of range") from e
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw)
        except ValueError as e:
            raise TaskDecodeError(f"record {index}: bad dueDate {raw!r}") from e
    raise TaskDecodeError(f"record {index}: bad dueDate")


def _decode_priority(raw: Any, index: int) -> Priority:
    if raw is None:
        return Priority.MEDIUM
    try:
        return Priority(raw)
    except ValueError as e:
        raise TaskDecodeError(f"record {index}: bad priority {raw!r}") from e


def _record_to_task(rec: Any, index: int) -> Task:
    if not isinstance(rec, dict):
        raise TaskDecodeError(f"record {index}: not an object")

    raw_id = _require(rec, "id", str, index)
    try:
        task_id = uuid.UUID(raw_id)
    except ValueError as e:
        raise TaskDecodeError(f"record {index}: bad id {raw_id!r}") from e

    return Task(
        id=task_id,
        description=_require(rec, "description", str, index),
        is_completed=_require(rec, "isCompleted", bool, index),
        priority=_decode_priority(rec.get("priority"), index),
        due_date=_decode_due_date(rec.get("dueDate"), index),
    )


def _task_to_record(task: Task) -> dict[str, Any]:
    rec: dict[str, Any] = {
        "id": str(task.id).upper(),
        "description": task.description,
        "isCompleted": bool(task.is_completed),
        "priority": Priority(task.priority).value,
    }
    if task.due_date is not None:
        rec["dueDate"] = task.due_date.isoformat()
    return rec


def decode_tasks(blob: str | bytes | None) -> list[Task]:
    """
    Decode a persisted blob into tasks.

    Raises TaskDecodeError on anything that is not a well-formed task list,
    including an absent or empty blob.
    """
    if blob is None:
        raise TaskDecodeError("no blob stored")
    if isinstance(blob, bytes):
        try:
            blob = blob.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TaskDecodeError("blob is not UTF-8") from e
    if not blob.strip():
        raise TaskDecodeError("blob is empty")

    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise TaskDecodeError(f"blob is not JSON: {e}") from e
    except RecursionError as e:
        raise TaskDecodeError("blob is nested too deeply") from e

    if not isinstance(data, list):
        raise TaskDecodeError("blob is not a JSON array")

    tasks: list[Task] = []
    seen: set[uuid.UUID] = set()
    for i, rec in enumerate(data):
        task = _record_to_task(rec, i)
        if task.id in seen:
            logger.warning("Dropping duplicate task id=%s at record %d", task.id, i)
            continue
        seen.add(task.id)
        tasks.append(task)
    return tasks


def encode_tasks(tasks: list[Task]) -> str:
    try:
        return json.dumps([_task_to_record(t) for t in tasks], ensure_ascii=False)
    except Exception as e:
        raise TaskEncodeError(f"failed to encode {len(tasks)} tasks: {e}") from e
