from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from enum import Enum
from datetime import datetime, timezone
from typing import Any
import uuid


class TaskValidationError(ValueError):
    """Task input rejected; the store was not touched."""


class TaskLoadError(ValueError):
    """Persisted record could not be decoded into tasks."""


class TaskPriority(str, Enum):
    high = "High"
    medium = "Medium"
    low = "Low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {TaskPriority.high: 1, TaskPriority.medium: 2, TaskPriority.low: 3}


def parse_due_date(value: Any) -> datetime:
    """
    Accept an ISO-8601 string or datetime and return naive local wall-clock time.

    Aware inputs (offset or trailing Z) are converted to the host timezone.
    Naive inputs that fall in a DST gap move forward to the instant they
    denote, so the result always survives a save/load through UTC.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("due date is required")
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"invalid due date: {text!r}") from None
    if not isinstance(value, datetime):
        raise ValueError("due date must be an ISO-8601 string")
    try:
        # fold is set on the result, so the repeated DST hour keeps its instant
        return datetime.fromtimestamp(value.timestamp())
    except (OverflowError, OSError):
        raise ValueError(f"due date out of range: {value!r}") from None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(_CamelModel):
    name: str = Field(min_length=1)
    description: str = ""
    due_date: datetime
    priority: TaskPriority = TaskPriority.medium

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, v: Any) -> datetime:
        return parse_due_date(v)


class Task(_CamelModel):
    id: str = Field(min_length=1, frozen=True)
    name: str = Field(min_length=1)
    description: str = ""
    due_date: datetime
    priority: TaskPriority
    is_completed: bool = False

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, v: Any) -> datetime:
        return parse_due_date(v)

    @field_serializer("due_date")
    def _serialize_due_date(self, v: datetime) -> str:
        # naive values are local time; persist the absolute instant
        return v.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class TaskProgress(BaseModel):
    completed: int
    total: int


def sort_key(task: Task) -> tuple[bool, int, datetime]:
    return (task.is_completed, task.priority.rank, task.due_date)


def new_task_id() -> str:
    return str(uuid.uuid4())
