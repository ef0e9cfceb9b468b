# devlog/api/routes/sessions.py
"""
/sessions

Session browsing and the project organization (session x key) reports.

The report routes are declared before `/sessions/{session_uuid}` so that
`reports` is never captured as a session uuid.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from devlog.api.deps import get_report_service, get_session_service
from devlog.schemas.reports import DailyReportSet, OrganizationMatrixReport
from devlog.schemas.sessions import SessionDetail, SessionListResponse
from devlog.services.report_service import ReportService
from devlog.services.session_service import SessionService

router = APIRouter(prefix="/sessions")


@router.get("/reports/project-organization", response_model=OrganizationMatrixReport)
async def project_organization(
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    start_date: Optional[str] = Query(default=None, alias="startDate", description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(default=None, alias="endDate", description="YYYY-MM-DD (defaults to startDate)"),
    service: ReportService = Depends(get_report_service),
):
    """Single matrix over the whole [startDate, endDate] window."""
    return await service.project_organization(project_id, start_date, end_date)


@router.get("/reports/project-organization/daily", response_model=DailyReportSet)
async def project_organization_daily(
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    start_date: Optional[str] = Query(default=None, alias="startDate", description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(default=None, alias="endDate", description="YYYY-MM-DD (defaults to startDate)"),
    service: ReportService = Depends(get_report_service),
):
    """One matrix per day with sessions, plus a combined matrix for the range."""
    return await service.project_organization_by_days(project_id, start_date, end_date)


@router.get("/project/{project_id}", response_model=SessionListResponse)
async def list_project_sessions(project_id: str, service: SessionService = Depends(get_session_service)):
    return await service.list_sessions(project_id)


@router.get("/{session_uuid}", response_model=SessionDetail)
async def session_detail(session_uuid: str, service: SessionService = Depends(get_session_service)):
    return await service.session_detail(session_uuid)
