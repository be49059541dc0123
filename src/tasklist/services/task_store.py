import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Union

from pydantic import ValidationError

from tasklist.domain.task_models import (
    Task,
    TaskCreate,
    TaskPriority,
    TaskProgress,
    TaskValidationError,
    new_task_id,
    sort_key,
)
from tasklist.domain.task_repo import TaskRepo

logger = logging.getLogger("tasklist.tasks")


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        field = ".".join(str(p) for p in err["loc"]) or "input"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


class TaskStore:
    """
    Owns the ordered task collection.

    Every mutation sorts and then writes the full collection through the repo.
    Callers get copies; re-fetch by id after a mutation.
    """

    def __init__(self, repo: TaskRepo):
        self.repo = repo
        self._tasks: List[Task] = []
        self._lock = asyncio.Lock()

    async def load(self) -> None:
        async with self._lock:
            self._tasks = list(await self.repo.load())
            self.sort()
        logger.info("store.loaded", extra={"category": "tasks", "event": "store.loaded", "total": len(self._tasks)})

    @property
    def tasks(self) -> List[Task]:
        return [t.model_copy() for t in self._tasks]

    def upcoming(self) -> List[Task]:
        return [t.model_copy() for t in self._tasks if not t.is_completed]

    def completed(self) -> List[Task]:
        return [t.model_copy() for t in self._tasks if t.is_completed]

    def progress(self) -> TaskProgress:
        done = sum(1 for t in self._tasks if t.is_completed)
        return TaskProgress(completed=done, total=len(self._tasks))

    def get(self, task_id: str) -> Optional[Task]:
        task = self._find(task_id)
        return task.model_copy() if task else None

    def sort(self) -> None:
        self._tasks.sort(key=sort_key)

    async def add(
        self,
        name: str,
        description: Optional[str],
        due_date: Union[str, datetime],
        priority: Union[str, TaskPriority] = TaskPriority.medium,
    ) -> Task:
        try:
            data = TaskCreate(name=name, description=description, due_date=due_date, priority=priority)
        except ValidationError as e:
            msg = _describe(e)
            logger.info(
                "task.create_rejected",
                extra={"category": "tasks", "event": "task.create_rejected", "reason": msg},
            )
            raise TaskValidationError(msg) from e

        task = Task(
            id=new_task_id(),
            name=data.name,
            description=data.description,
            due_date=data.due_date,
            priority=data.priority,
        )
        async with self._lock:
            await self._commit(self._tasks + [task])

        logger.info(
            "task.create",
            extra={"category": "tasks", "event": "task.create", "task_id": task.id, "priority": task.priority.value},
        )
        return task.model_copy()

    async def remove(self, task_id: str) -> bool:
        async with self._lock:
            kept = [t for t in self._tasks if t.id != task_id]
            if len(kept) == len(self._tasks):
                return False
            await self._commit(kept)

        logger.info("task.remove", extra={"category": "tasks", "event": "task.remove", "task_id": task_id})
        return True

    async def toggle_complete(self, task_id: str) -> bool:
        async with self._lock:
            task = self._find(task_id)
            if task is None:
                return False
            flipped = task.model_copy(update={"is_completed": not task.is_completed})
            await self._commit([flipped if t.id == task_id else t for t in self._tasks])

        logger.info(
            "task.toggle",
            extra={"category": "tasks", "event": "task.toggle", "task_id": task_id, "is_completed": flipped.is_completed},
        )
        return True

    async def _commit(self, tasks: List[Task]) -> None:
        # memory only changes once the full rewrite has been stored
        tasks.sort(key=sort_key)
        await self.repo.save(tasks)
        self._tasks = tasks

    def _find(self, task_id: str) -> Optional[Task]:
        return next((t for t in self._tasks if t.id == task_id), None)
