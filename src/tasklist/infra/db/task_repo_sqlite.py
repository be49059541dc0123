from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Sequence

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from tasklist.domain.task_models import Task
from tasklist.infra.db.task_codec import DEFAULT_STORAGE_KEY, encode_tasks, load_record


class Base(DeclarativeBase):
    pass


class KeyValueRow(Base):
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def make_sqlite_url(db_path: str) -> str:
    # db_path like "./data/tasklist.db"; parent dirs are created
    p = Path(db_path).resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{p.as_posix()}"


class SQLiteTaskRepo:
    """Stores the task record as one row of a key/value table."""

    def __init__(self, engine: AsyncEngine, key: str = DEFAULT_STORAGE_KEY):
        self.engine = engine
        self.sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            engine, expire_on_commit=False
        )
        self.key = key

    @classmethod
    def from_path(cls, db_path: str, key: str = DEFAULT_STORAGE_KEY) -> "SQLiteTaskRepo":
        return cls(create_async_engine(make_sqlite_url(db_path)), key=key)

    async def init_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def save(self, tasks: Sequence[Task]) -> None:
        row = KeyValueRow(key=self.key, value=encode_tasks(tasks), updated_at=datetime.now(timezone.utc))
        async with self.sessionmaker() as session:
            await session.merge(row)
            await session.commit()

    async def load(self) -> List[Task]:
        async with self.sessionmaker() as session:
            row = await session.get(KeyValueRow, self.key)
            raw = row.value if row else None

        return await load_record(raw, self.key, self.save)

    async def dispose(self) -> None:
        await self.engine.dispose()
