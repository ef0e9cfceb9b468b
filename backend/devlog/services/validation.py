# devlog/services/validation.py
"""
Validation gate for filter and report parameters.

Every function here is pure: it takes raw caller input and returns a validated
value or raises ValidationError. Validation runs once at the boundary; store
and aggregation code assume validated input and never re-check it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple

from devlog.core.config import settings
from devlog.core.errors import ValidationError
from devlog.db.models import SQL_INT_MAX
from devlog.services.records import DATA_TYPES
from devlog.utils.parsers import parse_calendar_date, parse_timestamp_to_utc_naive


@dataclass(frozen=True)
class LogFilter:
    """
    Validated, conjunctive filter over log entries.

    Time bounds are naive UTC and both inclusive.
    """
    device_uuid: Optional[str] = None
    project_id: Optional[int] = None
    session_uuid: Optional[str] = None
    key: Optional[str] = None
    data_type: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    has_session: bool = False
    page: int = 1
    page_size: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def with_page(self, page: int) -> "LogFilter":
        return replace(self, page=page)

    def criteria(self) -> dict:
        """Non-empty filter criteria (pagination excluded), for logging and echo."""
        out = {}
        for name in ("device_uuid", "project_id", "session_uuid", "key", "data_type", "start_time", "end_time"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out


# camelCase (HTTP/query) -> snake_case field names
_ALIASES = {
    "deviceUuid": "device_uuid",
    "projectId": "project_id",
    "sessionUuid": "session_uuid",
    "dataType": "data_type",
    "startTime": "start_time",
    "endTime": "end_time",
    "pageSize": "page_size",
}


def _normalize_keys(raw: Mapping[str, Any]) -> dict:
    return {_ALIASES.get(k, k): v for k, v in raw.items()}


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _optional_str(value: Any) -> Optional[str]:
    return None if _blank(value) else str(value).strip()


def _parse_int(value: Any, field: str) -> Optional[int]:
    if _blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"invalid {field}")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid {field}")
    if not -SQL_INT_MAX <= parsed <= SQL_INT_MAX:
        raise ValidationError(f"invalid {field}")
    return parsed


def _parse_time(value: Any, field: str) -> Optional[datetime]:
    if _blank(value):
        return None
    try:
        return parse_timestamp_to_utc_naive(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"invalid {field}")


def validate_data_type(value: Any) -> Optional[str]:
    if _blank(value):
        return None
    data_type = str(value).strip().lower()
    if data_type not in DATA_TYPES:
        raise ValidationError("invalid dataType", details={"allowed": list(DATA_TYPES)})
    return data_type


def _check_order(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError("start after end")


def clamp_page_size(page_size: Optional[int], *, default: int, maximum: int) -> int:
    if page_size is None:
        return min(default, maximum)
    return max(1, min(int(page_size), maximum))


def validate_filter(
    raw: Optional[Mapping[str, Any]] = None,
    *,
    max_page_size: Optional[int] = None,
    default_page_size: Optional[int] = None,
) -> LogFilter:
    """
    Validate a raw filter (camelCase or snake_case keys).

    - dataType must be record|warning|error
    - startTime <= endTime when both are present
    - pageSize clamped to [1, max]; page coerced to >= 1
    """
    values = _normalize_keys(raw or {})
    maximum = max_page_size if max_page_size is not None else settings.MAX_PAGE_SIZE
    default = default_page_size if default_page_size is not None else settings.DEFAULT_PAGE_SIZE

    data_type = validate_data_type(values.get("data_type"))
    start = _parse_time(values.get("start_time"), "startTime")
    end = _parse_time(values.get("end_time"), "endTime")
    _check_order(start, end)

    page = max(1, _parse_int(values.get("page"), "page") or 1)
    page_size = clamp_page_size(_parse_int(values.get("page_size"), "pageSize"), default=default, maximum=maximum)
    if (page - 1) * page_size > SQL_INT_MAX:
        raise ValidationError("invalid page")

    return LogFilter(
        device_uuid=_optional_str(values.get("device_uuid")),
        project_id=_parse_int(values.get("project_id"), "projectId"),
        session_uuid=_optional_str(values.get("session_uuid")),
        key=_optional_str(values.get("key")),
        data_type=data_type,
        start_time=start,
        end_time=end,
        page=page,
        page_size=page_size,
    )


def validate_time_range(start: Any, end: Any) -> Tuple[datetime, datetime]:
    """Both bounds are required for a time-range report."""
    if _blank(start) or _blank(end):
        raise ValidationError("startTime and endTime are required")
    start_dt = _parse_time(start, "startTime")
    end_dt = _parse_time(end, "endTime")
    _check_order(start_dt, end_dt)
    return start_dt, end_dt


def validate_device_uuid(value: Any) -> str:
    device_uuid = _optional_str(value)
    if device_uuid is None:
        raise ValidationError("deviceUuid is required")
    return device_uuid


def validate_session_uuid(value: Any) -> str:
    session_uuid = _optional_str(value)
    if session_uuid is None:
        raise ValidationError("sessionUuid is required")
    return session_uuid


def validate_project_id(value: Any) -> int:
    project_id = _parse_int(value, "projectId")
    if project_id is None:
        raise ValidationError("projectId is required")
    if project_id < 0:
        raise ValidationError("invalid projectId")
    return project_id


def validate_date_range(
    start_date: Any,
    end_date: Any = None,
    *,
    max_days: Optional[int] = None,
) -> Tuple[date, date]:
    """
    Validate an inclusive calendar date range (YYYY-MM-DD).

    `end_date` defaults to `start_date`. When `max_days` is given, ranges
    covering more calendar days are rejected.
    """
    if _blank(start_date):
        raise ValidationError("startDate is required")
    try:
        start = parse_calendar_date(start_date)
    except (TypeError, ValueError):
        raise ValidationError("invalid startDate")

    if _blank(end_date):
        end = start
    else:
        try:
            end = parse_calendar_date(end_date)
        except (TypeError, ValueError):
            raise ValidationError("invalid endDate")

    if start > end:
        raise ValidationError("start after end")

    # day windows need the previous and next calendar day to exist
    if start == date.min:
        raise ValidationError("invalid startDate")
    if end == date.max:
        raise ValidationError("invalid endDate")

    if max_days is not None and (end - start).days + 1 > max_days:
        raise ValidationError(f"date range exceeds {max_days} days", details={"maxDays": max_days})

    return start, end
