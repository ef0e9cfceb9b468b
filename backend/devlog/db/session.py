# devlog/db/session.py
"""
Database session and initialization utilities.

We use:
- SQLAlchemy async engine + AsyncSession
- SQLite via aiosqlite driver by default (any async SQLAlchemy URL works)

Key points:
- `init_db()` creates tables and applies SQLite pragmas when the URL is SQLite.
- `get_session()` is a FastAPI dependency that yields one AsyncSession per request.
"""

from __future__ import annotations

import logging
import os
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from devlog.core.config import settings
from devlog.db.models import Base

logger = logging.getLogger(__name__)


def _is_sqlite(url: str | URL) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def _ensure_sqlite_dir(url: str | URL) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    database = make_url(url).database
    if not database or database == ":memory:":
        return
    os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)


# Keep echo=False to avoid logging SQL in normal use.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
)

# Session factory used by FastAPI dependencies and services.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


@retry(
    retry=retry_if_exception_type(OperationalError),
    stop=stop_after_attempt(settings.DB_INIT_ATTEMPTS),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5.0),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Initialize database schema.

    Pragmas (SQLite only):
    - journal_mode=WAL: report reads don't block the ingestion writer
    - synchronous=NORMAL: good balance for durability vs speed
    """
    bind = bind or engine
    sqlite = _is_sqlite(bind.url)

    if sqlite:
        _ensure_sqlite_dir(bind.url)

    async with bind.begin() as conn:
        if sqlite:
            await conn.execute(text("PRAGMA journal_mode=WAL;"))
            await conn.execute(text("PRAGMA synchronous=NORMAL;"))

        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema ready (%s)", bind.url.get_backend_name())


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a request-scoped AsyncSession.

    Ensures:
    - session is always closed
    - transactions are controlled explicitly in service logic
    """
    async with AsyncSessionLocal() as session:
        yield session
