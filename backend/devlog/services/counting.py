# devlog/services/counting.py
"""
Counting reports: device, time-range and error summaries.

Each report is a fold over store aggregates. Inputs are already validated;
an unknown device or an empty window yields zero counts, not an error.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Optional

from devlog.schemas.reports import (
    DeviceReport,
    ErrorGroupItem,
    ErrorReport,
    TimeRangeReport,
    TypeCounts,
)
from devlog.schemas.logs import LogItem
from devlog.services.log_store import LogStore, TypeSummary
from devlog.services.records import DATA_TYPES
from devlog.services.validation import LogFilter
from devlog.utils.parsers import isoformat_z, isoformat_z_or_none


def fold_type_counts(rows: Iterable[TypeSummary]) -> Dict[str, int]:
    """Collapse grouped rows into {record, warning, error} (missing types are 0)."""
    counts = {dt: 0 for dt in DATA_TYPES}
    for row in rows:
        if row.data_type in counts:
            counts[row.data_type] += row.count
    return counts


async def device_report(store: LogStore, device_uuid: str) -> DeviceReport:
    """Totals for one device in a single grouped pass."""
    rows = await store.summarize_by_data_type(LogFilter(device_uuid=device_uuid))
    counts = fold_type_counts(rows)

    first: Optional[datetime] = min((r.first_created_at for r in rows if r.first_created_at), default=None)
    last: Optional[datetime] = max((r.last_created_at for r in rows if r.last_created_at), default=None)

    return DeviceReport(
        device_uuid=device_uuid,
        total_logs=sum(counts.values()),
        type_counts=TypeCounts(**counts),
        first_log_time=isoformat_z_or_none(first),
        last_log_time=isoformat_z_or_none(last),
    )


async def time_range_report(store: LogStore, start: datetime, end: datetime) -> TimeRangeReport:
    """Totals and distinct devices for entries with start <= created_at <= end."""
    flt = LogFilter(start_time=start, end_time=end)
    counts = await store.count_by_data_type(flt)
    device_count = await store.distinct_device_count(flt)

    return TimeRangeReport(
        start_time=isoformat_z(start),
        end_time=isoformat_z(end),
        total_logs=sum(counts.values()),
        type_counts=TypeCounts(**counts),
        device_count=device_count,
    )


async def error_report(store: LogStore, *, limit: int) -> ErrorReport:
    """
    Error entries in store order, capped at `limit`.

    `total_errors` is the true count even when the list is truncated.
    """
    flt = LogFilter(data_type="error", page=1, page_size=limit)
    entries, total = await store.list_entries(flt)
    groups = await store.error_groups()

    return ErrorReport(
        total_errors=total,
        truncated=len(entries) < total,
        errors=[LogItem.from_record(e) for e in entries],
        groups=[
            ErrorGroupItem(
                device_uuid=g.device_uuid,
                key=g.key,
                count=g.count,
                last_occurrence=isoformat_z(g.last_occurrence),
            )
            for g in groups
        ],
    )
