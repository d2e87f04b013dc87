from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from math import ceil
from typing import TYPE_CHECKING, Optional, Sequence

from ..database.document_store import Cursor
from .model import AttendanceRecord

if TYPE_CHECKING:
    from .service import AttendanceService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceFilter:
    """Teacher views are scoped to ``teacher_id``; head-teacher views leave it empty.

    The date range is applied to the records already fetched, never pushed
    down to the store.
    """

    teacher_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def filter_by_date_range(
    records: Sequence[AttendanceRecord],
    start_date: Optional[date],
    end_date: Optional[date],
) -> list[AttendanceRecord]:
    """Keep records whose date lies in [start_date, end_date]; order is preserved."""
    if start_date is None or end_date is None:
        return list(records)
    return [r for r in records if start_date <= r.work_date <= end_date]


@dataclass(frozen=True)
class Page:
    """One screenful of the attendance projection.

    ``window`` is what was fetched from the store; ``items`` is the window
    after the date-range filter.
    """

    items: tuple[AttendanceRecord, ...]
    window: tuple[AttendanceRecord, ...]
    page_number: int
    page_size: int
    has_more: bool
    total: int
    next_cursor: Optional[Cursor] = None
    show_all: bool = False
    truncated: bool = False
    warning: Optional[str] = None
    date_range: tuple[Optional[date], Optional[date]] = field(default=(None, None))

    @property
    def total_pages(self) -> int:
        if self.show_all:
            return 1
        return max(ceil(self.total / self.page_size), 1) if self.page_size else 1

    def with_date_range(self, start_date: Optional[date], end_date: Optional[date]) -> "Page":
        return replace(
            self,
            items=tuple(filter_by_date_range(self.window, start_date, end_date)),
            date_range=(start_date, end_date),
        )

    def to_dict(self) -> dict:
        start, end = self.date_range
        return {
            "records": [r.to_dict() for r in self.items],
            "page": self.page_number,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "total": self.total,
            "has_more": self.has_more,
            "show_all": self.show_all,
            "truncated": self.truncated,
            "warning": self.warning,
            "start": start.isoformat() if start else None,
            "end": end.isoformat() if end else None,
        }


class AttendancePaginator:
    """Forward/backward navigation over the ledger for one viewer.

    Forward navigation follows the cursor of the last record on the page.
    Backward navigation pops a stack of page-start cursors, so page N is
    always re-read from the same starting point it was first read from.
    """

    def __init__(self, service: "AttendanceService", attendance_filter: AttendanceFilter, *, page_size: int):
        self._service = service
        self._filter = attendance_filter
        self._page_size = int(page_size)
        self._starts: list[Optional[Cursor]] = [None]
        self._current: Optional[Page] = None

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def current(self) -> Optional[Page]:
        return self._current

    @property
    def attendance_filter(self) -> AttendanceFilter:
        return self._filter

    @property
    def show_all(self) -> bool:
        return bool(self._current and self._current.show_all)

    def set_date_range(self, start_date: Optional[date], end_date: Optional[date]) -> Optional[Page]:
        self._filter = replace(self._filter, start_date=start_date, end_date=end_date)
        if self._current is not None:
            self._current = self._current.with_date_range(start_date, end_date)
        return self._current

    def _load(self, start: Optional[Cursor], page_number: int) -> Page:
        page = self._service.list_page(
            self._filter,
            cursor=start,
            page_size=self._page_size,
            page_number=page_number,
        )
        self._current = page
        return page

    def first(self) -> Page:
        self._starts = [None]
        return self._load(None, 1)

    def next_page(self) -> Page:
        current = self._current
        if current is None:
            return self.first()
        if current.show_all or not current.has_more or current.next_cursor is None:
            return current

        page = self._service.list_page(
            self._filter,
            cursor=current.next_cursor,
            page_size=self._page_size,
            page_number=current.page_number + 1,
        )
        self._starts.append(current.next_cursor)
        self._current = page
        return page

    def previous_page(self) -> Page:
        current = self._current
        if current is None:
            return self.first()
        if current.show_all or len(self._starts) <= 1:
            return current

        start = self._starts[-2]
        page = self._load(start, len(self._starts) - 1)
        self._starts.pop()
        return page

    def all(self) -> Page:
        self._starts = [None]
        self._current = self._service.list_all(self._filter)
        return self._current
