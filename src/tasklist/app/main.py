from pathlib import Path
from typing import Optional
import os
import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.templating import Jinja2Templates

from tasklist.app.routes import tasks
from tasklist.domain.task_repo import TaskRepo
from tasklist.infra.db.task_codec import DEFAULT_STORAGE_KEY
from tasklist.infra.db.task_repo_memory import InMemoryTaskRepo
from tasklist.infra.db.task_repo_sqlite import SQLiteTaskRepo
from tasklist.services.task_store import TaskStore
from tasklist.observability.logging import setup_logging
from tasklist.app.middleware.access_log import AccessLogMiddleware

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
logger = logging.getLogger("tasklist.system")


def make_repo_from_env() -> TaskRepo:
    backend = os.getenv("TASKS_BACKEND", "sqlite").lower()
    key = os.getenv("TASKS_STORAGE_KEY", DEFAULT_STORAGE_KEY)
    if backend == "memory":
        return InMemoryTaskRepo(key=key)
    if backend == "sqlite":
        return SQLiteTaskRepo.from_path(os.getenv("DB_PATH", "./data/tasklist.db"), key=key)
    raise ValueError(f"unknown TASKS_BACKEND: {backend!r} (expected 'sqlite' or 'memory')")


def create_app(repo: Optional[TaskRepo] = None) -> FastAPI:
    setup_logging()
    logger.info("system.start", extra={"category": "system", "event": "system.start"})

    app = FastAPI(title="Task List")
    app.add_middleware(AccessLogMiddleware)

    # Static files (CSS/JS)
    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    if repo is None:
        repo = make_repo_from_env()
    app.state.task_store = TaskStore(repo)

    app.include_router(tasks.router)

    @app.on_event("startup")
    async def _startup():
        await repo.init_schema()
        logger.info(
            "db.ready",
            extra={"category": "system", "event": "db.ready", "backend": type(repo).__name__},
        )
        await app.state.task_store.load()

    @app.on_event("shutdown")
    async def _shutdown():
        if isinstance(repo, SQLiteTaskRepo):
            await repo.dispose()

    # Pages
    @app.get("/", response_class=HTMLResponse)
    def home(request: Request):
        store: TaskStore = request.app.state.task_store
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "upcoming": store.upcoming(),
                "completed": store.completed(),
                "progress": store.progress(),
            },
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
