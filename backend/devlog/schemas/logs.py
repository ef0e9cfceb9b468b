# devlog/schemas/logs.py
"""
Schemas for the /logs endpoints (ingest, browse, delete).
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from devlog.db.models import SQL_INT_MAX
from devlog.schemas.base import CamelModel
from devlog.services.records import LogRecord
from devlog.utils.parsers import isoformat_z, serialize_value


class LogCreate(CamelModel):
    """
    Body of POST /logs.

    Example:
    {
      "deviceUuid": "6f1c...",
      "dataType": "record",
      "key": "temp",
      "value": {"celsius": 21.5},
      "projectId": 3,
      "sessionUuid": "c0ffee...",
      "timestamp": 1704067200000
    }
    """
    device_uuid: str = Field(..., min_length=1, max_length=64, description="Emitting device")
    data_type: Literal["record", "warning", "error"] = Field(..., description="Entry classification")
    key: str = Field(..., min_length=1, max_length=255, description="Log key (matrix column)")
    value: Any = Field(default=None, description="Opaque payload; non-strings are stored as JSON")
    project_id: Optional[int] = Field(default=None, ge=0, le=SQL_INT_MAX, description="Owning project")
    session_uuid: Optional[str] = Field(default=None, max_length=64, description="Device run identifier")
    timestamp: Optional[int] = Field(
        default=None, ge=0, le=SQL_INT_MAX, description="Client epoch (informational only)"
    )

    @field_validator("device_uuid", "key")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("value")
    @classmethod
    def _check_serializable(cls, v: Any) -> Any:
        serialize_value(v)
        return v

    @field_validator("session_uuid")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class LogItem(CamelModel):
    """A single stored log entry."""
    id: int
    device_uuid: str
    data_type: str
    key: str
    value: Optional[str] = None
    project_id: Optional[int] = None
    session_uuid: Optional[str] = None
    client_ip: Optional[str] = None
    client_timestamp: Optional[int] = None
    created_at: str = Field(..., description="ISO8601 UTC server timestamp")

    @classmethod
    def from_record(cls, r: LogRecord) -> "LogItem":
        return cls(
            id=r.id,
            device_uuid=r.device_uuid,
            data_type=r.data_type,
            key=r.key,
            value=r.value,
            project_id=r.project_id,
            session_uuid=r.session_uuid,
            client_ip=r.client_ip,
            client_timestamp=r.client_timestamp,
            created_at=isoformat_z(r.created_at),
        )


class Pagination(CamelModel):
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total: int = Field(..., ge=0, description="Total matching entries before pagination")
    total_pages: int = Field(..., ge=0)


class LogsResponse(CamelModel):
    """
    Response for browsing logs with filters.

    Entries are ordered oldest first (createdAt, then id).
    """
    logs: List[LogItem] = Field(default_factory=list)
    pagination: Pagination
    filters_applied: Dict[str, Any] = Field(
        default_factory=dict,
        description="Echo of applied filters (for UI clarity)",
    )


class DeleteResponse(CamelModel):
    success: bool = True
    deleted: int = Field(default=1, ge=0, description="Number of entries removed")
