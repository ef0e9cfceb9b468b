# devlog/services/matrix_builder.py
"""
Session x key matrix ("project organization") report.

Pipeline over one snapshot of entries:
1) group session-tagged entries into indexed sessions
2) keep data points (non-empty key, non-null value)
3) collect keys in first-seen (created_at, id) order
4) resolve repeated (session, key) cells with a ConflictPolicy
5) derive totals and display labels

The function is pure: same entries + same parameters -> same report.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from devlog.core.config import settings
from devlog.schemas.reports import OrganizationMatrixReport, SessionInfo
from devlog.services.records import LogRecord
from devlog.services.session_grouping import group_sessions
from devlog.utils.parsers import isoformat_z


class ConflictPolicy(str, Enum):
    """How repeated values for the same (session, key) collapse into one cell."""
    LAST = "last"
    FIRST = "first"
    CONCAT = "concat"

    @classmethod
    def from_settings(cls) -> "ConflictPolicy":
        return cls(settings.MATRIX_CONFLICT_POLICY)


class OrderedKeySet:
    """Insertion-ordered set of keys; re-adding a key keeps its first position."""

    def __init__(self, keys: Iterable[str] = ()):
        self._index: Dict[str, int] = {}
        for k in keys:
            self.add(k)

    def add(self, key: str) -> bool:
        if key in self._index:
            return False
        self._index[key] = len(self._index)
        return True

    def position(self, key: str) -> int:
        return self._index[key]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def as_list(self) -> List[str]:
        return list(self._index)


def resolve_cells(
    points: Iterable[LogRecord],
    policy: ConflictPolicy,
    separator: str,
) -> Dict[str, str]:
    """Collapse one session's data points (already in (created_at, id) order) into key -> value."""
    if policy is ConflictPolicy.CONCAT:
        collected: Dict[str, List[str]] = {}
        for p in points:
            collected.setdefault(p.key, []).append(p.value)
        return {k: separator.join(v) for k, v in collected.items()}

    cells: Dict[str, str] = {}
    for p in points:
        if policy is ConflictPolicy.FIRST:
            cells.setdefault(p.key, p.value)
        else:
            cells[p.key] = p.value
    return cells


def build_matrix(
    entries: Iterable[LogRecord],
    *,
    project_id: int,
    start_date: date,
    end_date: date,
    column_mapping: Optional[Mapping[str, str]] = None,
    policy: Optional[ConflictPolicy] = None,
    separator: Optional[str] = None,
) -> OrganizationMatrixReport:
    """
    Build the matrix report for the entries of one window.

    Every session in the window gets a row (possibly empty); only data points
    contribute cells and keys. `column_mapping` only affects `column_labels`.
    """
    policy = policy or ConflictPolicy.from_settings()
    separator = settings.MATRIX_CONCAT_SEPARATOR if separator is None else separator
    mapping = column_mapping or {}

    sessions = group_sessions(entries)

    # first-seen order is global across sessions, not per session
    keys = OrderedKeySet()
    points = sorted(
        (e for s in sessions for e in s.entries if e.is_data_point),
        key=lambda e: e.order_key,
    )
    for p in points:
        keys.add(p.key)

    matrix: Dict[str, Dict[str, str]] = {}
    session_info: Dict[str, SessionInfo] = {}
    for s in sessions:
        row = resolve_cells((e for e in s.entries if e.is_data_point), policy, separator)
        matrix[s.uuid] = {k: row[k] for k in sorted(row, key=keys.position)}
        session_info[s.uuid] = SessionInfo(index=s.index, start_time=isoformat_z(s.start_time), uuid=s.uuid)

    key_list = keys.as_list()
    return OrganizationMatrixReport(
        project_id=project_id,
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        devices=[s.uuid for s in sessions],
        keys=key_list,
        column_labels=[mapping.get(k) or k for k in key_list],
        session_info=session_info,
        matrix=matrix,
        total_devices=len(sessions),
        total_keys=len(key_list),
        total_entries=sum(len(row) for row in matrix.values()),
    )
