# devlog/services/session_grouping.py
"""
Session grouping.

A session is every entry sharing a `session_uuid`. Sessions are never stored;
they are recomputed from whatever entries the caller passes in, so identical
input always yields identical metadata and indexes.

Ordering:
- entries inside a session: (created_at, id)
- sessions: (start_time, smallest entry id), then 1-based `index`
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from devlog.services.records import DATA_TYPES, LogRecord


@dataclass
class SessionStats:
    """Derived per-session metadata."""
    uuid: str
    index: int
    start_time: datetime
    device_uuid: str
    project_id: Optional[int]
    min_entry_id: int
    log_count: int
    type_counts: Dict[str, int] = field(default_factory=dict)
    first_log_time: Optional[datetime] = None
    last_log_time: Optional[datetime] = None
    entries: List[LogRecord] = field(default_factory=list, repr=False)


def _stats_for(uuid: str, entries: List[LogRecord]) -> SessionStats:
    ordered = sorted(entries, key=lambda e: e.order_key)
    first = ordered[0]

    counts = {dt: 0 for dt in DATA_TYPES}
    for e in ordered:
        if e.data_type in counts:
            counts[e.data_type] += 1

    project_id = next((e.project_id for e in ordered if e.project_id is not None), None)

    return SessionStats(
        uuid=uuid,
        index=0,
        start_time=first.created_at,
        device_uuid=first.device_uuid,
        project_id=project_id,
        min_entry_id=min(e.id for e in ordered),
        log_count=len(ordered),
        type_counts=counts,
        first_log_time=first.created_at,
        last_log_time=ordered[-1].created_at,
        entries=ordered,
    )


def group_sessions(entries: Iterable[LogRecord]) -> List[SessionStats]:
    """
    Partition session-tagged entries into sessions and index them.

    Entries without a session uuid are dropped. Indexes are contiguous
    (1..N) and follow (start_time, min entry id).
    """
    buckets: "OrderedDict[str, List[LogRecord]]" = OrderedDict()
    for e in entries:
        if not e.session_uuid:
            continue
        buckets.setdefault(e.session_uuid, []).append(e)

    sessions = [_stats_for(uuid, items) for uuid, items in buckets.items()]
    sessions.sort(key=lambda s: (s.start_time, s.min_entry_id))
    for i, s in enumerate(sessions, start=1):
        s.index = i
    return sessions
