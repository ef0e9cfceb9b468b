"""
Pytest configuration and fixtures for the device log backend.

The settings singleton is created at import time, so the environment is
pinned here before any `devlog` module is imported.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("REPORT_TIMEZONE", "UTC")
os.environ.setdefault("MATRIX_CONFLICT_POLICY", "last")

from datetime import datetime, timedelta
from itertools import count

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from devlog.db.models import LogEntry, Project
from devlog.db.session import get_session, init_db
from devlog.services.records import LogRecord

BASE_TIME = datetime(2024, 1, 1, 8, 0, 0)


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test (StaticPool keeps the single connection alive)."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(session_factory):
    """
    Insert log rows with explicit timestamps.

    Usage:
        await seed(device_uuid="dev-1", data_type="error", minutes=5)

    `minutes` is an offset from BASE_TIME; `created_at` wins when given.
    Returns the stored ids in insertion order.
    """

    async def _seed(*rows: dict, **single) -> list:
        items = list(rows) or [single]
        ids = []
        async with session_factory() as session:
            for r in items:
                r = dict(r)
                created_at = r.pop("created_at", None) or BASE_TIME + timedelta(minutes=r.pop("minutes", 0))
                r.pop("minutes", None)
                row = LogEntry(
                    device_uuid=r.pop("device_uuid", "dev-1"),
                    data_type=r.pop("data_type", "record"),
                    log_key=r.pop("key", "k"),
                    log_value=r.pop("value", "v"),
                    session_uuid=r.pop("session_uuid", None),
                    project_id=r.pop("project_id", None),
                    created_at=created_at,
                    **r,
                )
                session.add(row)
                await session.flush()
                ids.append(row.id)
            await session.commit()
        return ids

    return _seed


@pytest_asyncio.fixture
async def project(session_factory):
    """A project with id 1 and a partial column mapping."""
    async with session_factory() as session:
        row = Project(id=1, uuid="proj-0001", name="Thermal rig", column_mapping={"temp": "Temperature"})
        session.add(row)
        await session.commit()
        return row


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client against the app with the DB dependency pointed at the test engine."""
    from devlog.main import app

    async def _override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_record():
    """
    Build in-memory LogRecords for the pure report functions.

    Ids increase with each call unless given explicitly.
    """
    ids = count(1)

    def _make(
        session_uuid=None,
        key="k",
        value="v",
        *,
        minutes=0,
        created_at=None,
        id=None,
        device_uuid="dev-1",
        data_type="record",
        project_id=1,
    ) -> LogRecord:
        return LogRecord(
            id=id if id is not None else next(ids),
            device_uuid=device_uuid,
            data_type=data_type,
            key=key,
            value=value,
            created_at=created_at or BASE_TIME + timedelta(minutes=minutes),
            session_uuid=session_uuid,
            project_id=project_id,
        )

    return _make
