# devlog/services/report_service.py
"""
Report orchestration.

Each method validates raw caller input (so invalid requests never reach the
store), reads one snapshot from the store and hands it to the pure report
functions. Nothing is cached between calls.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from devlog.core.config import settings
from devlog.schemas.reports import (
    DailyReportSet,
    DeviceReport,
    ErrorReport,
    OrganizationMatrixReport,
    TimeRangeReport,
)
from devlog.services import counting
from devlog.services.day_partition import build_daily_report_set, window_bounds
from devlog.services.log_store import LogStore
from devlog.services.matrix_builder import ConflictPolicy, build_matrix
from devlog.services.project_store import ProjectStore
from devlog.services.validation import (
    LogFilter,
    validate_date_range,
    validate_device_uuid,
    validate_project_id,
    validate_time_range,
)
from devlog.utils.parsers import resolve_timezone

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(
        self,
        logs: LogStore,
        projects: ProjectStore,
        *,
        policy: Optional[ConflictPolicy] = None,
        timezone_name: Optional[str] = None,
    ):
        self._logs = logs
        self._projects = projects
        self._policy = policy or ConflictPolicy.from_settings()
        self._zone = resolve_timezone(timezone_name or settings.REPORT_TIMEZONE)

    # -----------------------
    # Counting reports
    # -----------------------
    async def device_report(self, device_uuid: Any) -> DeviceReport:
        device_uuid = validate_device_uuid(device_uuid)
        report = await counting.device_report(self._logs, device_uuid)
        logger.info("Device report generated (device=%s, total=%d)", device_uuid, report.total_logs)
        return report

    async def time_range_report(self, start_time: Any, end_time: Any) -> TimeRangeReport:
        start, end = validate_time_range(start_time, end_time)
        report = await counting.time_range_report(self._logs, start, end)
        logger.info(
            "Time-range report generated (start=%s, end=%s, total=%d, devices=%d)",
            report.start_time, report.end_time, report.total_logs, report.device_count,
        )
        return report

    async def error_report(self, limit: Optional[int] = None) -> ErrorReport:
        report = await counting.error_report(self._logs, limit=limit or settings.ERROR_REPORT_LIMIT)
        logger.info(
            "Error report generated (total=%d, returned=%d, groups=%d)",
            report.total_errors, len(report.errors), len(report.groups),
        )
        return report

    # -----------------------
    # Matrix reports
    # -----------------------
    async def _window_snapshot(self, project_id: int, start_date, end_date):
        start, end = window_bounds(start_date, end_date, self._zone)
        flt = LogFilter(project_id=project_id, start_time=start, end_time=end, has_session=True)
        return await self._logs.fetch_entries(flt)

    async def project_organization(
        self,
        project_id: Any,
        start_date: Any,
        end_date: Any = None,
    ) -> OrganizationMatrixReport:
        """Single-window matrix over [startDate, endDate]."""
        project_id = validate_project_id(project_id)
        start, end = validate_date_range(start_date, end_date)
        project = await self._projects.get_by_id(project_id)

        entries = await self._window_snapshot(project_id, start, end)
        report = build_matrix(
            entries,
            project_id=project_id,
            start_date=start,
            end_date=end,
            column_mapping=project.column_mapping,
            policy=self._policy,
        )
        logger.info(
            "Organization report generated (project=%s, %s..%s, sessions=%d, keys=%d, entries=%d)",
            project_id, start, end, report.total_devices, report.total_keys, report.total_entries,
        )
        return report

    async def project_organization_by_days(
        self,
        project_id: Any,
        start_date: Any,
        end_date: Any = None,
    ) -> DailyReportSet:
        """Per-day matrices plus the combined matrix, from one store snapshot."""
        project_id = validate_project_id(project_id)
        start, end = validate_date_range(start_date, end_date, max_days=settings.MAX_REPORT_DAYS)
        project = await self._projects.get_by_id(project_id)

        entries = await self._window_snapshot(project_id, start, end)
        report_set = build_daily_report_set(
            entries,
            project_id=project_id,
            start_date=start,
            end_date=end,
            zone=self._zone,
            column_mapping=project.column_mapping,
            policy=self._policy,
        )
        logger.info(
            "Daily organization reports generated (project=%s, %s..%s, days=%d, sessions=%d)",
            project_id, start, end, len(report_set.daily_reports), report_set.combined_report.total_devices,
        )
        return report_set
