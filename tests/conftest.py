# tests/conftest.py

from __future__ import annotations

import os
import tempfile
import time
from collections.abc import Iterator

import pytest

from tasklist.infra.db.task_repo_memory import InMemoryTaskRepo
from tasklist.services.task_store import TaskStore


def pytest_configure(config: pytest.Config) -> None:
    # tasklist.app.main builds an app at import time; keep its logs/db out of the repo
    scratch = tempfile.mkdtemp(prefix="tasklist-tests-")
    os.environ.setdefault("LOG_DIR", os.path.join(scratch, "logs"))
    os.environ.setdefault("DB_PATH", os.path.join(scratch, "tasklist.db"))
    os.environ.setdefault("TASKS_BACKEND", "memory")


@pytest.fixture()
def repo() -> InMemoryTaskRepo:
    return InMemoryTaskRepo()


@pytest.fixture()
def store(repo: InMemoryTaskRepo) -> TaskStore:
    return TaskStore(repo)


@pytest.fixture()
def new_york_tz() -> Iterator[None]:
    """Run the test with the host clock in America/New_York (has DST transitions)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    old = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    try:
        yield
    finally:
        if old is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = old
        time.tzset()
