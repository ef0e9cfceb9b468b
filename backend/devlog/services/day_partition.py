# devlog/services/day_partition.py
"""
Day partitioning for matrix reports.

Calendar days are defined in the reporting time zone. One snapshot of the
window is split into per-day buckets; each non-empty day gets its own matrix,
and the combined matrix is built from the whole window in a single pass
(never by merging daily reports, so sessions spanning midnight count once).
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from dateutil.rrule import DAILY, rrule

from devlog.schemas.reports import DailyReportSet
from devlog.services.matrix_builder import ConflictPolicy, build_matrix
from devlog.services.records import LogRecord
from devlog.utils.parsers import day_window_utc, local_day


def iter_days(start_date: date, end_date: date) -> List[date]:
    """Every calendar day in [start_date, end_date], ascending."""
    return [
        d.date()
        for d in rrule(DAILY, dtstart=datetime.combine(start_date, datetime.min.time()),
                       until=datetime.combine(end_date, datetime.min.time()))
    ]


def window_bounds(start_date: date, end_date: date, zone: tzinfo) -> Tuple[datetime, datetime]:
    """
    Naive UTC bounds covering [start_date, end_date] in `zone`.

    The end bound is inclusive (one microsecond before the next local midnight)
    to match the store's inclusive time filter.
    """
    start, _ = day_window_utc(start_date, zone)
    _, end_exclusive = day_window_utc(end_date, zone)
    return start, end_exclusive - timedelta(microseconds=1)


def partition_by_day(entries: Iterable[LogRecord], zone: tzinfo) -> Dict[date, List[LogRecord]]:
    buckets: Dict[date, List[LogRecord]] = defaultdict(list)
    for e in entries:
        buckets[local_day(e.created_at, zone)].append(e)
    return buckets


def build_daily_report_set(
    entries: Iterable[LogRecord],
    *,
    project_id: int,
    start_date: date,
    end_date: date,
    zone: tzinfo,
    column_mapping: Optional[Mapping[str, str]] = None,
    policy: Optional[ConflictPolicy] = None,
    separator: Optional[str] = None,
) -> DailyReportSet:
    """
    Per-day matrices plus an independently computed combined matrix.

    Days without sessions are omitted. Entries falling outside the window are
    ignored, so the caller may pass a slightly wider snapshot.
    """
    days = iter_days(start_date, end_date)
    buckets = partition_by_day(entries, zone)

    in_window: List[LogRecord] = []
    daily = []
    for day in days:
        day_entries = buckets.get(day, [])
        in_window.extend(day_entries)
        report = build_matrix(
            day_entries,
            project_id=project_id,
            start_date=day,
            end_date=day,
            column_mapping=column_mapping,
            policy=policy,
            separator=separator,
        )
        if report.total_devices:
            daily.append(report)

    combined = build_matrix(
        in_window,
        project_id=project_id,
        start_date=start_date,
        end_date=end_date,
        column_mapping=column_mapping,
        policy=policy,
        separator=separator,
    )

    return DailyReportSet(
        project_id=project_id,
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        daily_reports=daily,
        combined_report=combined,
    )
