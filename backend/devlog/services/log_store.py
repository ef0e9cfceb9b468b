# devlog/services/log_store.py
"""
Log store access (DB -> LogRecord).

Responsibilities:
- Build conjunctive WHERE clauses from a validated LogFilter
- Ordered retrieval (created_at ASC, id ASC) with offset/limit pagination
- Aggregate queries used by the counting reports
- Bound every statement with a timeout and surface failures as StoreError

Notes:
- The store never validates input; callers pass the output of the validation gate.
- Consecutive pages of `list_entries` partition the result set because the
  ordering is total (id breaks created_at ties).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devlog.core.config import settings
from devlog.core.errors import NotFoundError, StoreError
from devlog.db.models import LogEntry, utcnow_naive
from devlog.services.records import DATA_TYPES, LogRecord
from devlog.services.validation import LogFilter

logger = logging.getLogger(__name__)

_ORDERING = (LogEntry.created_at.asc(), LogEntry.id.asc())


@dataclass(frozen=True)
class TypeSummary:
    """One row of the grouped per-dataType aggregate."""
    data_type: str
    count: int
    first_created_at: Optional[datetime]
    last_created_at: Optional[datetime]


@dataclass(frozen=True)
class ErrorGroup:
    """Error entries tallied per (device, key)."""
    device_uuid: str
    key: str
    count: int
    last_occurrence: datetime


class LogStore:
    """Request-scoped access to the `logs` table."""

    def __init__(self, session: AsyncSession, *, timeout_s: Optional[float] = None):
        self._session = session
        self._timeout_s = timeout_s if timeout_s is not None else settings.STORE_TIMEOUT_SECONDS

    # -----------------------
    # Internals
    # -----------------------
    async def _run(self, op: str, coro) -> Any:
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout_s)
        except asyncio.TimeoutError as e:
            logger.error("Store operation %s timed out after %ss", op, self._timeout_s)
            raise StoreError(f"{op} timed out after {self._timeout_s}s") from e
        except SQLAlchemyError as e:
            logger.error("Store operation %s failed: %s", op, e)
            raise StoreError(f"{op} failed") from e

    @staticmethod
    def _conditions(flt: LogFilter) -> list:
        conds = []
        if flt.device_uuid:
            conds.append(LogEntry.device_uuid == flt.device_uuid)
        if flt.session_uuid:
            conds.append(LogEntry.session_uuid == flt.session_uuid)
        if flt.project_id is not None:
            conds.append(LogEntry.project_id == flt.project_id)
        if flt.key:
            conds.append(LogEntry.log_key == flt.key)
        if flt.data_type:
            conds.append(LogEntry.data_type == flt.data_type)
        if flt.start_time is not None:
            conds.append(LogEntry.created_at >= flt.start_time)
        if flt.end_time is not None:
            conds.append(LogEntry.created_at <= flt.end_time)
        if flt.has_session:
            conds.append(LogEntry.session_uuid.is_not(None))
        return conds

    # -----------------------
    # Reads
    # -----------------------
    async def list_entries(self, flt: LogFilter) -> Tuple[List[LogRecord], int]:
        """One page of entries plus the total match count before pagination."""
        conds = self._conditions(flt)
        total = await self.count(flt)

        stmt = select(LogEntry).where(*conds).order_by(*_ORDERING).offset(flt.offset).limit(flt.page_size)
        result = await self._run("list", self._session.execute(stmt))
        rows = result.scalars().all()

        logger.debug("Listed %d/%d entries (page=%d, size=%d)", len(rows), total, flt.page, flt.page_size)
        return [LogRecord.from_row(r) for r in rows], total

    async def fetch_entries(self, flt: LogFilter) -> List[LogRecord]:
        """Every matching entry in store order (report paths; ignores pagination)."""
        stmt = select(LogEntry).where(*self._conditions(flt)).order_by(*_ORDERING)
        result = await self._run("fetch", self._session.execute(stmt))
        return [LogRecord.from_row(r) for r in result.scalars().all()]

    async def count(self, flt: LogFilter) -> int:
        stmt = select(func.count()).select_from(LogEntry).where(*self._conditions(flt))
        result = await self._run("count", self._session.execute(stmt))
        return int(result.scalar() or 0)

    async def get_by_id(self, log_id: int) -> LogRecord:
        row = await self._run("get", self._session.get(LogEntry, log_id))
        if row is None:
            raise NotFoundError(f"Log {log_id} not found")
        return LogRecord.from_row(row)

    async def summarize_by_data_type(self, flt: LogFilter) -> List[TypeSummary]:
        """Count, first and last created_at per data type in a single grouped query."""
        stmt = (
            select(
                LogEntry.data_type,
                func.count(LogEntry.id),
                func.min(LogEntry.created_at),
                func.max(LogEntry.created_at),
            )
            .where(*self._conditions(flt))
            .group_by(LogEntry.data_type)
        )
        result = await self._run("summarize", self._session.execute(stmt))
        return [
            TypeSummary(data_type=dt, count=int(cnt), first_created_at=first, last_created_at=last)
            for dt, cnt, first, last in result.all()
        ]

    async def count_by_data_type(self, flt: LogFilter) -> Dict[str, int]:
        """{record, warning, error} counts; types without entries are 0."""
        counts = {dt: 0 for dt in DATA_TYPES}
        for row in await self.summarize_by_data_type(flt):
            if row.data_type in counts:
                counts[row.data_type] = row.count
        return counts

    async def distinct_device_count(self, flt: LogFilter) -> int:
        stmt = select(func.count(func.distinct(LogEntry.device_uuid))).where(*self._conditions(flt))
        result = await self._run("distinct devices", self._session.execute(stmt))
        return int(result.scalar() or 0)

    async def error_groups(self, limit: Optional[int] = None) -> List[ErrorGroup]:
        """Error tallies per (device, key), most frequent first."""
        count_col = func.count(LogEntry.id).label("cnt")
        stmt = (
            select(LogEntry.device_uuid, LogEntry.log_key, count_col, func.max(LogEntry.created_at))
            .where(LogEntry.data_type == "error")
            .group_by(LogEntry.device_uuid, LogEntry.log_key)
            .order_by(count_col.desc(), LogEntry.device_uuid.asc(), LogEntry.log_key.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._run("error groups", self._session.execute(stmt))
        return [
            ErrorGroup(device_uuid=dev, key=key, count=int(cnt), last_occurrence=last)
            for dev, key, cnt, last in result.all()
        ]

    # -----------------------
    # Writes
    # -----------------------
    async def create(
        self,
        *,
        device_uuid: str,
        data_type: str,
        key: str,
        value: Optional[str],
        session_uuid: Optional[str] = None,
        project_id: Optional[int] = None,
        client_ip: Optional[str] = None,
        client_timestamp: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> LogRecord:
        row = LogEntry(
            device_uuid=device_uuid,
            data_type=data_type,
            log_key=key,
            log_value=value,
            session_uuid=session_uuid,
            project_id=project_id,
            client_ip=client_ip,
            client_timestamp=client_timestamp,
            created_at=created_at or utcnow_naive(),
        )
        self._session.add(row)
        await self._commit("create")
        return LogRecord.from_row(row)

    async def delete_by_id(self, log_id: int) -> bool:
        result = await self._run("delete", self._session.execute(delete(LogEntry).where(LogEntry.id == log_id)))
        await self._commit("delete")
        return (result.rowcount or 0) > 0

    async def delete_by_filter(self, flt: LogFilter) -> int:
        stmt = delete(LogEntry).where(*self._conditions(flt))
        result = await self._run("delete by filter", self._session.execute(stmt))
        await self._commit("delete by filter")
        return int(result.rowcount or 0)

    async def _commit(self, op: str) -> None:
        try:
            await self._run(op, self._session.commit())
        except StoreError:
            await self._session.rollback()
            raise
