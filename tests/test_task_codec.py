# tests/test_task_codec.py

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime

import pytest

from pocket_todo.tasks.task_codec import TaskDecodeError, decode_tasks, encode_tasks
from pocket_todo.tasks.task_models import Priority, Task

ID1 = "E621E1F8-C36C-495A-93FC-0C247A3E6E5F"
ID2 = "0B7C4D4B-2F6A-4A55-9E0C-3C1B8E7C1D22"


def test_decodes_blob_without_priority_or_due_date() -> None:
    blob = json.dumps([{"id": ID1, "description": "Buy milk", "isCompleted": False}])

    (task,) = decode_tasks(blob)
    assert task.id == uuid.UUID(ID1)
    assert task.description == "Buy milk"
    assert task.is_completed is False
    assert task.priority == Priority.MEDIUM
    assert task.due_date is None


def test_decodes_reference_date_seconds() -> None:
    blob = json.dumps(
        [{"id": ID1, "description": "d", "isCompleted": True, "priority": "High", "dueDate": 86400}]
    )

    (task,) = decode_tasks(blob.encode("utf-8"))
    assert task.priority == Priority.HIGH
    assert task.due_date == datetime(2001, 1, 2, tzinfo=UTC)


def test_encode_uses_persisted_field_names() -> None:
    task = Task(
        id=uuid.UUID(ID1),
        description="Pay bills",
        priority=Priority.LOW,
        due_date=datetime(2026, 10, 20, 9, 0),
    )
    (rec,) = json.loads(encode_tasks([task]))

    assert rec == {
        "id": ID1,
        "description": "Pay bills",
        "isCompleted": False,
        "priority": "Low",
        "dueDate": "2026-10-20T09:00:00",
    }


def test_encode_omits_missing_due_date() -> None:
    (rec,) = json.loads(encode_tasks([Task(description="x")]))
    assert "dueDate" not in rec


def test_duplicate_ids_keep_first() -> None:
    blob = json.dumps(
        [
            {"id": ID1, "description": "first", "isCompleted": False},
            {"id": ID2, "description": "other", "isCompleted": False},
            {"id": ID1.lower(), "description": "dup", "isCompleted": True},
        ]
    )
    tasks = decode_tasks(blob)
    assert [t.description for t in tasks] == ["first", "other"]


@pytest.mark.parametrize(
    "records",
    [
        [{"description": "no id", "isCompleted": False}],
        [{"id": ID1, "isCompleted": False}],
        [{"id": ID1, "description": "no flag"}],
        [{"id": ID1, "description": "d", "isCompleted": "yes"}],
        [{"id": ID1, "description": 5, "isCompleted": False}],
        [{"id": ID1, "description": "d", "isCompleted": False, "priority": "Urgent"}],
        [{"id": ID1, "description": "d", "isCompleted": False, "dueDate": "tomorrow"}],
        [{"id": ID1, "description": "d", "isCompleted": False, "dueDate": float("nan")}],
        [{"id": ID1, "description": "d", "isCompleted": False, "dueDate": float("inf")}],
        [{"id": ID1, "description": "d", "isCompleted": False, "dueDate": 1e300}],
        [{"id": "not-a-uuid", "description": "d", "isCompleted": False}],
        # one bad record poisons the whole blob
        [{"id": ID1, "description": "ok", "isCompleted": False}, "oops"],
    ],
)
def test_schema_mismatch_fails_whole_blob(records: list) -> None:
    with pytest.raises(TaskDecodeError):
        decode_tasks(json.dumps(records))


@pytest.mark.parametrize("blob", [None, "", " ", b"\xff\xfe", "[", '{"a": 1}'])
def test_malformed_blob(blob) -> None:
    with pytest.raises(TaskDecodeError):
        decode_tasks(blob)


def test_empty_array_is_valid() -> None:
    assert decode_tasks("[]") == []


def test_deeply_nested_blob_is_a_decode_error() -> None:
    blob = "[" * 200_000 + "]" * 200_000
    with pytest.raises(TaskDecodeError):
        decode_tasks(blob)
