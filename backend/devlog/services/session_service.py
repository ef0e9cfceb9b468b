# devlog/services/session_service.py
"""
Session browsing: sessions of a project and the entries of one session.
"""

from __future__ import annotations

import logging
from typing import Any

from devlog.core.errors import NotFoundError
from devlog.schemas.logs import LogItem
from devlog.schemas.reports import TypeCounts
from devlog.schemas.sessions import SessionDetail, SessionListResponse, SessionSummary
from devlog.services.log_store import LogStore
from devlog.services.session_grouping import SessionStats, group_sessions
from devlog.services.validation import LogFilter, validate_project_id, validate_session_uuid
from devlog.utils.parsers import isoformat_z, isoformat_z_or_none

logger = logging.getLogger(__name__)


def _summary(s: SessionStats) -> SessionSummary:
    return SessionSummary(
        uuid=s.uuid,
        index=s.index,
        device_uuid=s.device_uuid,
        project_id=s.project_id,
        start_time=isoformat_z(s.start_time),
        log_count=s.log_count,
        type_counts=TypeCounts(**s.type_counts),
        first_log_time=isoformat_z_or_none(s.first_log_time),
        last_log_time=isoformat_z_or_none(s.last_log_time),
    )


class SessionService:
    def __init__(self, store: LogStore):
        self._store = store

    async def list_sessions(self, project_id: Any) -> SessionListResponse:
        """All sessions of a project, most recently active first."""
        project_id = validate_project_id(project_id)
        entries = await self._store.fetch_entries(LogFilter(project_id=project_id, has_session=True))
        sessions = group_sessions(entries)
        sessions.sort(key=lambda s: (s.last_log_time, s.index), reverse=True)

        logger.info("Sessions listed (project=%s, sessions=%d)", project_id, len(sessions))
        return SessionListResponse(
            project_id=project_id,
            total=len(sessions),
            sessions=[_summary(s) for s in sessions],
        )

    async def session_detail(self, session_uuid: Any) -> SessionDetail:
        session_uuid = validate_session_uuid(session_uuid)
        entries = await self._store.fetch_entries(LogFilter(session_uuid=session_uuid))
        sessions = group_sessions(entries)
        if not sessions:
            raise NotFoundError(f"Session {session_uuid} not found")

        s = sessions[0]
        return SessionDetail(
            session=_summary(s),
            logs=[LogItem.from_record(e) for e in reversed(s.entries)],
        )
