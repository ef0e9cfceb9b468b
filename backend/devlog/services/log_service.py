# devlog/services/log_service.py
"""
Log ingestion and browsing.

Responsibilities:
- Persist one entry per request (server assigns created_at, client IP captured)
- Browse with validated filters and page metadata
- Delete by id or by filter
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from devlog.core.errors import NotFoundError, ValidationError
from devlog.schemas.logs import DeleteResponse, LogCreate, LogItem, LogsResponse, Pagination
from devlog.services.log_store import LogStore
from devlog.services.validation import validate_filter
from devlog.utils.parsers import isoformat_z, serialize_value

logger = logging.getLogger(__name__)


def _echo(criteria: dict) -> dict:
    out = {}
    for name, value in criteria.items():
        out[name] = isoformat_z(value) if hasattr(value, "isoformat") else value
    return out


class LogService:
    def __init__(self, store: LogStore):
        self._store = store

    async def ingest(self, payload: LogCreate, client_ip: Optional[str] = None) -> LogItem:
        record = await self._store.create(
            device_uuid=payload.device_uuid,
            data_type=payload.data_type,
            key=payload.key,
            value=serialize_value(payload.value),
            session_uuid=payload.session_uuid,
            project_id=payload.project_id,
            client_ip=client_ip,
            client_timestamp=payload.timestamp,
        )
        logger.info(
            "Log stored (id=%s, device=%s, type=%s, session=%s)",
            record.id, record.device_uuid, record.data_type, record.session_uuid,
        )
        return LogItem.from_record(record)

    async def list_logs(self, raw: Optional[Mapping[str, Any]] = None) -> LogsResponse:
        flt = validate_filter(raw)
        records, total = await self._store.list_entries(flt)
        return LogsResponse(
            logs=[LogItem.from_record(r) for r in records],
            pagination=Pagination(
                page=flt.page,
                page_size=flt.page_size,
                total=total,
                total_pages=math.ceil(total / flt.page_size) if total else 0,
            ),
            filters_applied=_echo(flt.criteria()),
        )

    async def get_log(self, log_id: int) -> LogItem:
        return LogItem.from_record(await self._store.get_by_id(log_id))

    async def delete_log(self, log_id: int) -> DeleteResponse:
        if not await self._store.delete_by_id(log_id):
            raise NotFoundError(f"Log {log_id} not found")
        logger.info("Log deleted (id=%s)", log_id)
        return DeleteResponse(success=True, deleted=1)

    async def delete_logs(self, raw: Optional[Mapping[str, Any]] = None) -> DeleteResponse:
        """Delete every entry matching the filter; an empty filter is rejected."""
        flt = validate_filter(raw)
        criteria = flt.criteria()
        if not criteria:
            raise ValidationError("at least one filter criterion is required")
        deleted = await self._store.delete_by_filter(flt)
        logger.info("Logs deleted by filter (criteria=%s, deleted=%d)", _echo(criteria), deleted)
        return DeleteResponse(success=True, deleted=deleted)
