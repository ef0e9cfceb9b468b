# devlog/api/routes/reports.py
"""
/reports

Counting reports over stored entries:
- GET /reports/device/{deviceUuid}
- GET /reports/time-range?startTime=...&endTime=...
- GET /reports/errors
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from devlog.api.deps import get_report_service
from devlog.schemas.reports import DeviceReport, ErrorReport, TimeRangeReport
from devlog.services.report_service import ReportService

router = APIRouter(prefix="/reports")


@router.get("/device/{device_uuid}", response_model=DeviceReport)
async def device_report(device_uuid: str, service: ReportService = Depends(get_report_service)):
    """Totals for one device; an unknown device yields zero counts."""
    return await service.device_report(device_uuid)


@router.get("/time-range", response_model=TimeRangeReport)
async def time_range_report(
    start_time: Optional[str] = Query(default=None, alias="startTime", description="ISO8601, inclusive"),
    end_time: Optional[str] = Query(default=None, alias="endTime", description="ISO8601, inclusive"),
    service: ReportService = Depends(get_report_service),
):
    return await service.time_range_report(start_time, end_time)


@router.get("/errors", response_model=ErrorReport)
async def error_report(service: ReportService = Depends(get_report_service)):
    return await service.error_report()
