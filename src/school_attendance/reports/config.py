from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class ReportColumn:
    field: str
    header: str
    format: Optional[Callable[[Any], str]] = None

    def render(self, value: Any) -> str:
        if self.format is not None:
            return self.format(value)
        return "" if value is None else str(value)


@dataclass(frozen=True)
class ReportConfig:
    title: str
    columns: tuple[ReportColumn, ...]
    # True: both dates are required. False: the range is optional.
    date_range: bool = True

    @property
    def headers(self) -> list[str]:
        return [c.header for c in self.columns]


ATTENDANCE_REPORT = ReportConfig(
    title="Attendance Report",
    columns=(
        ReportColumn("teacher_name", "Teacher Name"),
        ReportColumn("date", "Date"),
        ReportColumn("check_in_time", "Check-In"),
        ReportColumn("check_out_time", "Check-Out", lambda v: v or "Not checked out"),
        ReportColumn("is_late", "Late Arrival", lambda v: "Yes" if v else "No"),
    ),
    date_range=False,
)
