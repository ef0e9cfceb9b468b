# devlog/db/models.py
"""
SQLAlchemy ORM models for the device log backend.

Design goals:
- Keep schema minimal: one append-only `logs` table plus `projects`.
- Use simple, explicit column types for SQLite compatibility.

Notes:
- Timestamps are stored as naive UTC datetimes (timezone-less) for SQLite simplicity.
  We convert to/from ISO 8601 with a trailing "Z" at the API boundary.
- `created_at` is server-assigned and is the only timestamp used for ordering
  and time windows. `client_timestamp` is kept for reference only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import JSON, BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Largest value an INTEGER / BIGINT column can bind (signed 64-bit).
SQL_INT_MAX = 2**63 - 1


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


class LogEntry(Base):
    """
    A single key/value log entry emitted by a device.

    Entries are immutable once stored; the only mutations are deletes.
    """

    __tablename__ = "logs"

    # Integer (not BigInteger) so SQLite assigns ROWID-backed autoincrement ids.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    device_uuid: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    session_uuid: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)
    project_id: Mapped[Optional[int]] = mapped_column(Integer, index=True, nullable=True)

    # IPv4 or IPv6
    client_ip: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)

    # record | warning | error
    data_type: Mapped[str] = mapped_column(String(16), index=True, nullable=False)

    log_key: Mapped[str] = mapped_column(String(255), nullable=False)

    # Opaque serialized payload; never interpreted by the report engine.
    log_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    client_timestamp: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), index=True, nullable=False, default=utcnow_naive
    )

    __table_args__ = (
        Index("idx_logs_device_type", "device_uuid", "data_type"),
        Index("idx_logs_project_time", "project_id", "created_at"),
    )


class Project(Base):
    """
    A project groups devices and sessions.

    `column_mapping` relabels matrix keys for display only.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    column_mapping: Mapped[Optional[Dict[str, str]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow_naive)
