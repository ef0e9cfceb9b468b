# devlog/schemas/sessions.py
"""
Schemas for /sessions (list per project, detail).
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from devlog.schemas.base import CamelModel
from devlog.schemas.logs import LogItem
from devlog.schemas.reports import TypeCounts


class SessionSummary(CamelModel):
    uuid: str
    index: int = Field(..., ge=1)
    device_uuid: str
    project_id: Optional[int] = None
    start_time: str
    log_count: int = Field(..., ge=0)
    type_counts: TypeCounts
    first_log_time: Optional[str] = None
    last_log_time: Optional[str] = None


class SessionListResponse(CamelModel):
    """Sessions of one project, most recently active first."""
    project_id: int
    total: int = Field(..., ge=0)
    sessions: List[SessionSummary] = Field(default_factory=list)


class SessionDetail(CamelModel):
    """A session with its entries, newest first."""
    session: SessionSummary
    logs: List[LogItem] = Field(default_factory=list)
