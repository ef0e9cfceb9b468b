# devlog/api/deps.py
"""
Request-scoped service factories.

Each request gets its own AsyncSession (via get_session) and therefore its own
stores and services; nothing here is shared between requests.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devlog.db.session import get_session
from devlog.services.log_service import LogService
from devlog.services.log_store import LogStore
from devlog.services.project_store import ProjectStore
from devlog.services.report_service import ReportService
from devlog.services.session_service import SessionService


def get_log_store(session: AsyncSession = Depends(get_session)) -> LogStore:
    return LogStore(session)


def get_project_store(session: AsyncSession = Depends(get_session)) -> ProjectStore:
    return ProjectStore(session)


def get_log_service(store: LogStore = Depends(get_log_store)) -> LogService:
    return LogService(store)


def get_session_service(store: LogStore = Depends(get_log_store)) -> SessionService:
    return SessionService(store)


def get_report_service(
    logs: LogStore = Depends(get_log_store),
    projects: ProjectStore = Depends(get_project_store),
) -> ReportService:
    return ReportService(logs, projects)
