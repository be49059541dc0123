from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from tasklist.domain.task_models import Task, TaskLoadError, new_task_id

logger = logging.getLogger("tasklist.storage")

DEFAULT_STORAGE_KEY = "tasks"

_task_list = TypeAdapter(List[Task])


def encode_tasks(tasks: Sequence[Task]) -> str:
    return _task_list.dump_json(list(tasks), by_alias=True).decode("utf-8")


def decode_tasks(raw: str) -> Tuple[List[Task], bool]:
    """
    Decode a stored record.

    Returns (tasks, repaired); repaired is True when ids had to be
    synthesized for records that lacked one or repeated an earlier id.
    """
    try:
        items = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise TaskLoadError(f"record is not JSON: {e}") from e

    if not isinstance(items, list):
        raise TaskLoadError(f"expected a JSON array, got {type(items).__name__}")

    seen: set[str] = set()
    repaired = False
    fixed: list[dict[str, Any]] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise TaskLoadError(f"record {i} is not an object")
        task_id = item.get("id")
        if not isinstance(task_id, str) or not task_id or task_id in seen:
            item = {**item, "id": new_task_id()}
            repaired = True
        seen.add(item["id"])
        fixed.append(item)

    try:
        return _task_list.validate_python(fixed), repaired
    except ValidationError as e:
        raise TaskLoadError(str(e)) from e


def read_record(raw: Optional[str], key: str) -> Tuple[List[Task], bool]:
    """Turn whatever sits under `key` into tasks; unreadable data is dropped."""
    if raw is None:
        return [], False
    try:
        return decode_tasks(raw)
    except TaskLoadError:
        logger.warning(
            "storage.load_corrupt",
            extra={"category": "storage", "event": "storage.load_corrupt", "key": key},
            exc_info=True,
        )
        return [], False


async def load_record(
    raw: Optional[str], key: str, save: Callable[[List[Task]], Awaitable[None]]
) -> List[Task]:
    """read_record, then write the collection back through `save` if ids were repaired."""
    tasks, repaired = read_record(raw, key)
    if repaired:
        logger.info(
            "storage.ids_repaired",
            extra={"category": "storage", "event": "storage.ids_repaired", "key": key},
        )
        await save(tasks)
    return tasks
