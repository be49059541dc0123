from __future__ import annotations
from typing import List, Protocol, Sequence

from tasklist.domain.task_models import Task


class TaskRepo(Protocol):
    """
    Persistence boundary for the task store.

    Every save is a full rewrite of one record under a fixed key;
    load returns [] when nothing was stored yet or the record is unreadable.
    """

    async def init_schema(self) -> None: ...

    async def save(self, tasks: Sequence[Task]) -> None: ...

    async def load(self) -> List[Task]: ...
