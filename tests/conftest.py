"""Shared fixtures: a scratch SQLite database per test, wired the same way the app wires Postgres."""

from datetime import datetime, timedelta, timezone

import pytest

from taskq.db.models import Task  # noqa: F401  (registers the task table)
from taskq.db.session import Base, build_engine, build_session_factory
from taskq.services.task_store import TaskStore
from taskq.settings import load_settings


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings(tmp_path, monkeypatch):
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    return load_settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'taskq.db'}",
        WORKER_ENABLED=False,
        FOO_DURATION_SECONDS=0,
        WORKER_IDLE_INTERVAL_SECONDS=10,
        WORKER_ERROR_BACKOFF_SECONDS=30,
    )


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory, clock) -> TaskStore:
    return TaskStore(session_factory, clock=clock)
