from __future__ import annotations
from typing import Dict, List, Optional, Sequence

from tasklist.domain.task_models import Task
from tasklist.infra.db.task_codec import DEFAULT_STORAGE_KEY, encode_tasks, load_record


class InMemoryTaskRepo:
    """
    Flat key -> text store living in process memory.

    Behaves like browser localStorage: the whole collection is one
    JSON record under a single key. Pass `items` to start from
    pre-existing (possibly legacy or broken) data.
    """
    def __init__(self, items: Optional[Dict[str, str]] = None, key: str = DEFAULT_STORAGE_KEY):
        self.items: Dict[str, str] = items if items is not None else {}
        self.key = key

    async def init_schema(self) -> None:
        return

    async def save(self, tasks: Sequence[Task]) -> None:
        self.items[self.key] = encode_tasks(tasks)

    async def load(self) -> List[Task]:
        return await load_record(self.items.get(self.key), self.key, self.save)
