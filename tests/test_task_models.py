# tests/test_task_models.py

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from tasklist.domain.task_models import Task, TaskCreate, TaskPriority, parse_due_date, sort_key

from factories import make_task


def test_parse_due_date_naive_is_kept_as_local_wall_clock() -> None:
    assert parse_due_date("2025-06-01T10:00") == datetime(2025, 6, 1, 10, 0)
    assert parse_due_date("  2025-06-01T10:00:30  ") == datetime(2025, 6, 1, 10, 0, 30)


def test_parse_due_date_converts_aware_input_to_local() -> None:
    expected = datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert parse_due_date("2025-06-01T10:00:00Z") == expected
    assert parse_due_date("2025-06-01T12:00:00+02:00") == expected


@pytest.mark.parametrize("bad", ["", "   ", "not-a-date", "2025-13-01T10:00", 12345, None])
def test_parse_due_date_rejects_garbage(bad) -> None:
    with pytest.raises(ValueError):
        parse_due_date(bad)


def test_priority_rank_order() -> None:
    ranks = [p.rank for p in (TaskPriority.high, TaskPriority.medium, TaskPriority.low)]
    assert ranks == sorted(ranks)
    assert TaskPriority("High") is TaskPriority.high


def test_task_create_strips_and_defaults() -> None:
    data = TaskCreate.model_validate({"name": "  Buy milk ", "dueDate": "2025-06-01T10:00"})
    assert data.name == "Buy milk"
    assert data.description == ""
    assert data.priority is TaskPriority.medium
    assert data.due_date == datetime(2025, 6, 1, 10, 0)


def test_task_create_rejects_blank_name() -> None:
    with pytest.raises(ValidationError):
        TaskCreate(name="   ", due_date="2025-06-01T10:00")


def test_task_json_uses_camel_case_and_absolute_due_date() -> None:
    task = make_task("Buy milk", priority=TaskPriority.high)
    payload = json.loads(task.model_dump_json(by_alias=True))

    assert set(payload) == {"id", "name", "description", "dueDate", "priority", "isCompleted"}
    assert payload["priority"] == "High"
    assert payload["isCompleted"] is False
    assert payload["dueDate"].endswith("Z")
    assert datetime.fromisoformat(payload["dueDate"]).astimezone().replace(tzinfo=None) == task.due_date

    assert Task.model_validate(payload) == task


def test_task_id_is_frozen() -> None:
    task = make_task()
    with pytest.raises(ValidationError):
        task.id = "other"


def test_sort_key_orders_completion_then_priority_then_due() -> None:
    early_low = make_task(due=datetime(2025, 1, 1), priority=TaskPriority.low)
    late_high = make_task(due=datetime(2025, 12, 1), priority=TaskPriority.high)
    early_high = make_task(due=datetime(2025, 1, 1), priority=TaskPriority.high)
    done_high = make_task(due=datetime(2024, 1, 1), priority=TaskPriority.high, done=True)

    ordered = sorted([done_high, early_low, late_high, early_high], key=sort_key)
    assert ordered == [early_high, late_high, early_low, done_high]


def test_repeated_dst_hour_keeps_its_instant(new_york_tz) -> None:
    first = make_task("first", due=parse_due_date("2025-11-02T01:30:00-04:00"))
    second = make_task("second", due=parse_due_date("2025-11-02T01:30:00-05:00"))

    assert json.loads(first.model_dump_json(by_alias=True))["dueDate"] == "2025-11-02T05:30:00Z"
    assert json.loads(second.model_dump_json(by_alias=True))["dueDate"] == "2025-11-02T06:30:00Z"


def test_parse_due_date_resolves_dst_gap_forward(new_york_tz) -> None:
    assert parse_due_date("2025-03-09T02:30") == datetime(2025, 3, 9, 3, 30)
