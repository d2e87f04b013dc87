from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, time
from typing import Any, Mapping, Optional

from ..common.datetime_utils import format_clock, format_date, parse_clock, parse_iso_date
from ..database.document_store import Cursor


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one teacher's attendance for one calendar day."""

    attendance_id: str
    teacher_id: str
    work_date: date
    check_in_time: time
    check_out_time: Optional[time]
    is_late: bool

    @property
    def checked_out(self) -> bool:
        return self.check_out_time is not None

    @property
    def cursor(self) -> Cursor:
        return (format_date(self.work_date), self.attendance_id)

    def with_checkout(self, check_out_time: time) -> "AttendanceRecord":
        return replace(self, check_out_time=check_out_time)

    def to_document(self) -> dict:
        return {
            "teacherId": self.teacher_id,
            "date": format_date(self.work_date),
            "checkInTime": format_clock(self.check_in_time),
            "checkOutTime": format_clock(self.check_out_time),
            "isLate": bool(self.is_late),
        }

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "AttendanceRecord":
        check_out = data.get("checkOutTime")
        return cls(
            attendance_id=doc_id,
            teacher_id=str(data["teacherId"]),
            work_date=parse_iso_date(data["date"]),
            check_in_time=parse_clock(data["checkInTime"]),
            check_out_time=parse_clock(check_out) if check_out else None,
            is_late=bool(data.get("isLate", False)),
        )

    def to_dict(self) -> dict:
        return {"id": self.attendance_id, **self.to_document()}
