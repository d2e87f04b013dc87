from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.pagination import filter_by_date_range
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_clock, format_date
from ..common.validators import require_date_range
from ..core.constants import REPORT_MAX_ROWS, SHOW_ALL_LIMIT
from .config import ATTENDANCE_REPORT, ReportConfig

logger = logging.getLogger(__name__)

UNKNOWN_TEACHER = "Unknown Teacher"


@dataclass(frozen=True)
class ReportData:
    config: ReportConfig
    headers: list[str]
    rows: list[list[str]]
    start: Optional[date] = None
    end: Optional[date] = None
    truncated: bool = False

    @property
    def warning(self) -> Optional[str]:
        return truncation_warning(len(self.rows)) if self.truncated else None


def truncation_warning(shown: int) -> str:
    return f"Only the first {shown} matching records are included. Narrow the date range to see the rest."


@dataclass(frozen=True)
class AttendanceAnalytics:
    daily_check_ins: dict[str, int]
    late: int
    on_time: int
    truncated: bool = False

    def to_dict(self) -> dict:
        return {
            "daily_check_ins": [{"date": d, "check_ins": n} for d, n in self.daily_check_ins.items()],
            "late": self.late,
            "on_time": self.on_time,
            "truncated": self.truncated,
            "warning": truncation_warning(self.late + self.on_time) if self.truncated else None,
        }


class ReportService:
    """Builds report tables and summaries from the attendance ledger.

    The ledger is read newest first in batches of ``batch_size`` until the
    batches move past the start of the range. At most ``max_rows`` matching
    records are kept; results cut at that cap are flagged ``truncated``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        teacher_names: Callable[[], dict[str, str]],
        batch_size: int = SHOW_ALL_LIMIT,
        max_rows: int = REPORT_MAX_ROWS,
    ):
        self._attendance = attendance
        self._teacher_names = teacher_names
        self._batch_size = max(int(batch_size), 1)
        self._max_rows = int(max_rows)

    def _records(
        self,
        start: Optional[date],
        end: Optional[date],
        teacher_id: Optional[str],
    ) -> tuple[list[AttendanceRecord], bool]:
        matched: list[AttendanceRecord] = []
        after = None
        while True:
            batch = self._attendance.list_recent(teacher_id=teacher_id, limit=self._batch_size, after=after)
            for r in filter_by_date_range(batch, start, end):
                if len(matched) >= self._max_rows:
                    logger.warning("Report cut at %s rows (%s..%s)", self._max_rows, start, end)
                    return matched, True
                matched.append(r)
            if len(batch) < self._batch_size:
                return matched, False
            if start is not None and end is not None and batch[-1].work_date < start:
                return matched, False
            after = batch[-1].cursor

    def build_rows(
        self,
        records: Sequence[AttendanceRecord],
        *,
        config: ReportConfig = ATTENDANCE_REPORT,
    ) -> list[list[str]]:
        names = self._teacher_names()
        rows = []
        for r in records:
            values = {
                "teacher_name": names.get(r.teacher_id, UNKNOWN_TEACHER),
                "date": format_date(r.work_date),
                "check_in_time": format_clock(r.check_in_time),
                "check_out_time": format_clock(r.check_out_time),
                "is_late": r.is_late,
            }
            rows.append([col.render(values.get(col.field)) for col in config.columns])
        return rows

    def attendance_report(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        teacher_id: Optional[str] = None,
        config: ReportConfig = ATTENDANCE_REPORT,
    ) -> ReportData:
        """Report rows for ``start..end`` inclusive, or the whole ledger when no range is given."""
        if config.date_range or start or end:
            start, end = require_date_range(start, end)
        records, truncated = self._records(start, end, teacher_id)
        logger.info("Attendance report %s..%s: %s rows", start, end, len(records))
        return ReportData(
            config=config,
            headers=config.headers,
            rows=self.build_rows(records, config=config),
            start=start,
            end=end,
            truncated=truncated,
        )

    def analytics(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        teacher_id: Optional[str] = None,
    ) -> AttendanceAnalytics:
        records, truncated = self._records(start, end, teacher_id)
        daily = Counter(format_date(r.work_date) for r in records)
        late = sum(1 for r in records if r.is_late)
        return AttendanceAnalytics(
            daily_check_ins=dict(sorted(daily.items())),
            late=late,
            on_time=len(records) - late,
            truncated=truncated,
        )
