# devlog/services/records.py
"""
In-memory representation of stored log entries.

The report engine works on `LogRecord` instead of ORM rows so that grouping,
pivoting and day partitioning are plain functions over lists and can be
tested without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from devlog.db.models import LogEntry

DATA_TYPES = ("record", "warning", "error")


@dataclass(frozen=True)
class LogRecord:
    """A decoded, immutable log entry (timestamps are naive UTC)."""
    id: int
    device_uuid: str
    data_type: str
    key: str
    value: Optional[str]
    created_at: datetime
    session_uuid: Optional[str] = None
    project_id: Optional[int] = None
    client_ip: Optional[str] = None
    client_timestamp: Optional[int] = None

    @property
    def order_key(self) -> Tuple[datetime, int]:
        """Total order used everywhere: server time, then id."""
        return (self.created_at, self.id)

    @property
    def is_data_point(self) -> bool:
        """Structured data point (has a key and a value), as opposed to a lifecycle log."""
        return bool(self.key) and self.value is not None

    @classmethod
    def from_row(cls, row: LogEntry) -> "LogRecord":
        return cls(
            id=int(row.id),
            device_uuid=row.device_uuid,
            data_type=row.data_type,
            key=row.log_key,
            value=row.log_value,
            created_at=row.created_at,
            session_uuid=row.session_uuid,
            project_id=row.project_id,
            client_ip=row.client_ip,
            client_timestamp=row.client_timestamp,
        )
