# devlog/utils/parsers.py
"""
Parsing and normalization helpers shared by the validation gate, the store
and the report engine.

- Timestamps are normalized to naive UTC datetimes (the storage convention).
- Calendar days are interpreted in the configured reporting time zone.
- Log values are opaque: structured payloads are serialized once at ingest.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional, Tuple

import orjson
from dateutil import parser as dtparser
from dateutil import tz


def parse_timestamp_to_utc_naive(value: str | datetime) -> datetime:
    """
    Parse a timestamp string (or datetime) and normalize to naive UTC.

    - If tz-aware -> convert to UTC and drop tzinfo.
    - If tz-naive -> treat as UTC.

    Raises ValueError on unparseable input.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        dt = dtparser.isoparse(str(value).strip())
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_calendar_date(value: str | date) -> date:
    """Parse a YYYY-MM-DD string. Raises ValueError on anything else."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def isoformat_z(dt: datetime) -> str:
    """Convert naive UTC datetime to ISO8601 with trailing 'Z'."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat(timespec="milliseconds") + "Z"


def isoformat_z_or_none(dt: Optional[datetime]) -> Optional[str]:
    return isoformat_z(dt) if dt is not None else None


def resolve_timezone(name: str) -> tzinfo:
    """Look up a reporting time zone by IANA name (e.g. 'Asia/Shanghai')."""
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown time zone: {name}")
    return zone


def day_window_utc(day: date, zone: tzinfo) -> Tuple[datetime, datetime]:
    """
    Return the [start, end) bounds of a calendar day in `zone`, as naive UTC.

    Computed from consecutive local midnights so DST days are 23h/25h long.
    """
    start_local = datetime.combine(day, time.min, tzinfo=zone)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return (
        start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )


def local_day(created_at: datetime, zone: tzinfo) -> date:
    """Calendar day (in `zone`) of a naive UTC timestamp."""
    return created_at.replace(tzinfo=timezone.utc).astimezone(zone).date()


def serialize_value(value: Any) -> Optional[str]:
    """
    Serialize a log value for storage.

    Strings are stored verbatim; anything else (objects, arrays, numbers,
    booleans) is stored as compact JSON. Raises ValueError for payloads JSON
    cannot represent (e.g. integers beyond 64 bits).
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    try:
        return orjson.dumps(value).decode("utf-8")
    except orjson.JSONEncodeError as e:
        raise ValueError(f"value is not JSON serializable: {e}") from e
