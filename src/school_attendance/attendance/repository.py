from __future__ import annotations

from datetime import date, time
from typing import Callable, Optional, Protocol, Sequence

from ..database.document_store import Cursor, ErrorCallback, Unsubscribe
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Repository interface for the attendance ledger.

    Services depend on this interface, never on a concrete store.
    """

    def get_for_teacher_and_date(self, teacher_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        teacher_id: str,
        work_date: date,
        check_in_time: time,
        is_late: bool,
    ) -> AttendanceRecord:
        """Raises DuplicateRecordError if the teacher already has a record for the day."""

        raise NotImplementedError

    def set_checkout(self, *, attendance_id: str, check_out_time: time) -> None:
        raise NotImplementedError

    def list_recent(
        self,
        *,
        teacher_id: Optional[str] = None,
        limit: Optional[int] = None,
        after: Optional[Cursor] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records ordered by date descending, starting after ``after``."""

        raise NotImplementedError

    def count(self, *, teacher_id: Optional[str] = None) -> int:
        raise NotImplementedError

    def subscribe(
        self,
        on_change: Callable[[list[AttendanceRecord]], None],
        on_error: Optional[ErrorCallback] = None,
        *,
        teacher_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Unsubscribe:
        raise NotImplementedError
