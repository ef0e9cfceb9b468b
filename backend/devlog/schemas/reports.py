# devlog/schemas/reports.py
"""
Schemas for counting reports and session matrix reports.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from devlog.schemas.base import CamelModel
from devlog.schemas.logs import LogItem


class TypeCounts(CamelModel):
    record: int = Field(default=0, ge=0)
    warning: int = Field(default=0, ge=0)
    error: int = Field(default=0, ge=0)


class DeviceReport(CamelModel):
    """Totals for a single device. Type counts always sum to totalLogs."""
    device_uuid: str
    total_logs: int = Field(..., ge=0)
    type_counts: TypeCounts
    first_log_time: Optional[str] = Field(default=None, description="ISO8601 UTC, null when no entries")
    last_log_time: Optional[str] = Field(default=None, description="ISO8601 UTC, null when no entries")


class TimeRangeReport(CamelModel):
    """Totals over an inclusive createdAt window."""
    start_time: str
    end_time: str
    total_logs: int = Field(..., ge=0)
    type_counts: TypeCounts
    device_count: int = Field(..., ge=0, description="Distinct devices in the window")


class ErrorGroupItem(CamelModel):
    device_uuid: str
    key: str
    count: int = Field(..., ge=1)
    last_occurrence: str


class ErrorReport(CamelModel):
    total_errors: int = Field(..., ge=0, description="True count, even when `errors` is capped")
    truncated: bool = False
    errors: List[LogItem] = Field(default_factory=list)
    groups: List[ErrorGroupItem] = Field(default_factory=list, description="Tally per (deviceUuid, key)")


class SessionInfo(CamelModel):
    index: int = Field(..., ge=1)
    start_time: str
    uuid: str


class OrganizationMatrixReport(CamelModel):
    """
    Session x key pivot for one project and one calendar window.

    `devices` holds session uuids (the name is kept for client compatibility).
    Absent cells are omitted from `matrix`, never null.
    """
    project_id: int
    start_date: str = Field(..., description="YYYY-MM-DD, inclusive")
    end_date: str = Field(..., description="YYYY-MM-DD, inclusive")
    devices: List[str] = Field(default_factory=list)
    keys: List[str] = Field(default_factory=list)
    column_labels: List[str] = Field(default_factory=list, description="Display labels aligned with `keys`")
    session_info: Dict[str, SessionInfo] = Field(default_factory=dict)
    matrix: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    total_devices: int = Field(default=0, ge=0, description="Number of sessions")
    total_keys: int = Field(default=0, ge=0)
    total_entries: int = Field(default=0, ge=0, description="Number of filled cells")


class DailyReportSet(CamelModel):
    project_id: int
    start_date: str
    end_date: str
    daily_reports: List[OrganizationMatrixReport] = Field(default_factory=list)
    combined_report: OrganizationMatrixReport
