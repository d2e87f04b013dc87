from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_PAGE_SIZE, SHOW_ALL_LIMIT
from ..core.enums import TodayStatus
from ..core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    DuplicateRecordError,
    NotCheckedInError,
    OutsideWindowError,
)
from ..database.document_store import Cursor
from .model import AttendanceRecord
from .pagination import AttendanceFilter, AttendancePaginator, Page, filter_by_date_range
from .policy import AttendancePolicy
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Check-in/check-out window enforcement and the ledger read model.

    Every rejection raises a ``ValidationError`` subclass carrying a message
    fit for the end user; store failures surface as BackendUnavailableError.
    Nothing is retried here.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        policy: Optional[AttendancePolicy] = None,
        clock: Callable[[], datetime] = now_local,
        page_size: int = DEFAULT_PAGE_SIZE,
        show_all_limit: int = SHOW_ALL_LIMIT,
    ):
        self._attendance = attendance
        self._policy = policy or AttendancePolicy()
        self._clock = clock
        self._page_size = int(page_size)
        self._show_all_limit = int(show_all_limit)

    @property
    def policy(self) -> AttendancePolicy:
        return self._policy

    @property
    def page_size(self) -> int:
        return self._page_size

    def attempt_check_in(self, teacher_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()
        moment = now.time()

        if not self._policy.check_in.contains(moment):
            logger.info("Check-in rejected for %s at %s: outside window", teacher_id, moment)
            raise OutsideWindowError(f"Check-in is allowed only between {self._policy.check_in.describe()}.")

        today = now.date()
        if self._attendance.get_for_teacher_and_date(teacher_id, today):
            logger.info("Check-in rejected for %s on %s: already checked in", teacher_id, today)
            raise AlreadyCheckedInError("You have already checked in today.")

        try:
            record = self._attendance.create_checkin(
                teacher_id=teacher_id,
                work_date=today,
                check_in_time=moment.replace(microsecond=0),
                is_late=self._policy.is_late(moment),
            )
        except DuplicateRecordError as exc:
            # Lost a race against a concurrent submission for the same day.
            raise AlreadyCheckedInError("You have already checked in today.") from exc

        logger.info("Teacher %s checked in on %s (late=%s)", teacher_id, today, record.is_late)
        return record

    def attempt_check_out(self, teacher_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()
        moment = now.time()

        if not self._policy.check_out.contains(moment):
            logger.info("Check-out rejected for %s at %s: outside window", teacher_id, moment)
            raise OutsideWindowError(f"Check-out is allowed only between {self._policy.check_out.describe()}.")

        today = now.date()
        record = self._attendance.get_for_teacher_and_date(teacher_id, today)
        if not record:
            raise NotCheckedInError("You must check in before checking out.")
        if record.checked_out:
            raise AlreadyCheckedOutError("You have already checked out today.")

        check_out_time = moment.replace(microsecond=0)
        self._attendance.set_checkout(attendance_id=record.attendance_id, check_out_time=check_out_time)

        logger.info("Teacher %s checked out on %s", teacher_id, today)
        return record.with_checkout(check_out_time)

    def get_today_record(self, teacher_id: str, today: date) -> Optional[AttendanceRecord]:
        """Get today's attendance record for a teacher"""
        return self._attendance.get_for_teacher_and_date(teacher_id, today)

    def today_status(self, teacher_id: str, *, now: Optional[datetime] = None) -> tuple[TodayStatus, Optional[AttendanceRecord]]:
        now = now or self._clock()
        record = self.get_today_record(teacher_id, now.date())
        if not record:
            return TodayStatus.NOT_CHECKED_IN, None
        if record.checked_out:
            return TodayStatus.CHECKED_OUT, record
        return TodayStatus.CHECKED_IN, record

    def list_page(
        self,
        attendance_filter: AttendanceFilter,
        *,
        cursor: Optional[Cursor] = None,
        page_size: Optional[int] = None,
        page_number: int = 1,
    ) -> Page:
        page_size = int(page_size or self._page_size)

        # One extra row tells whether another page exists.
        fetched = list(
            self._attendance.list_recent(
                teacher_id=attendance_filter.teacher_id,
                limit=page_size + 1,
                after=cursor,
            )
        )
        window = fetched[:page_size]
        has_more = len(fetched) > page_size
        total = self._attendance.count(teacher_id=attendance_filter.teacher_id)

        return Page(
            items=tuple(filter_by_date_range(window, attendance_filter.start_date, attendance_filter.end_date)),
            window=tuple(window),
            page_number=page_number,
            page_size=page_size,
            has_more=has_more,
            total=total,
            next_cursor=window[-1].cursor if window else None,
            date_range=(attendance_filter.start_date, attendance_filter.end_date),
        )

    def list_all(self, attendance_filter: AttendanceFilter) -> Page:
        """Single fetch of up to ``show_all_limit`` records, no pagination."""
        window = list(
            self._attendance.list_recent(
                teacher_id=attendance_filter.teacher_id,
                limit=self._show_all_limit,
            )
        )
        total = self._attendance.count(teacher_id=attendance_filter.teacher_id)
        truncated = total > self._show_all_limit
        warning = None
        if truncated:
            warning = f"Showing the first {self._show_all_limit} records. Use pagination for more."
            logger.info("Show-all view truncated: %s of %s records", self._show_all_limit, total)

        return Page(
            items=tuple(filter_by_date_range(window, attendance_filter.start_date, attendance_filter.end_date)),
            window=tuple(window),
            page_number=1,
            page_size=self._show_all_limit,
            has_more=False,
            total=total,
            show_all=True,
            truncated=truncated,
            warning=warning,
            date_range=(attendance_filter.start_date, attendance_filter.end_date),
        )

    def paginator(self, attendance_filter: AttendanceFilter, *, page_size: Optional[int] = None) -> AttendancePaginator:
        return AttendancePaginator(self, attendance_filter, page_size=page_size or self._page_size)
