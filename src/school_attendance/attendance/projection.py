from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from datetime import date
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from ..core.enums import PageMode
from ..core.exceptions import BackendUnavailableError
from ..database.document_store import Unsubscribe
from .model import AttendanceRecord
from .pagination import AttendanceFilter, AttendancePaginator, Page, filter_by_date_range
from .repository import AttendanceRepository

if TYPE_CHECKING:
    from .service import AttendanceService

logger = logging.getLogger(__name__)


class AttendanceProjection:
    """Locally held view of the ledger for one viewer.

    Local writes are applied immediately and marked pending. Snapshots from
    the store (re-reads or subscription pushes) are merged per record id,
    confirmed versions replacing local ones. The last good state is kept so
    it can be served read-only while the backend is unreachable.
    """

    def __init__(self, paginator: AttendancePaginator):
        self._paginator = paginator
        self._records: list[AttendanceRecord] = []
        self._pending: set[str] = set()
        self._page: Optional[Page] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self.stale = False

    @property
    def records(self) -> tuple[AttendanceRecord, ...]:
        f = self._paginator.attendance_filter
        return tuple(filter_by_date_range(self._records, f.start_date, f.end_date))

    @property
    def page(self) -> Optional[Page]:
        return self._page

    @property
    def pending_ids(self) -> frozenset[str]:
        return frozenset(self._pending)

    @property
    def teacher_scope(self) -> Optional[str]:
        return self._paginator.attendance_filter.teacher_id

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def _limit(self) -> Optional[int]:
        if self._page is not None and self._page.show_all:
            return None
        return self._paginator.page_size

    def _trim(self) -> None:
        limit = self._limit()
        if limit is not None:
            self._records = self._records[:limit]

    def load(self, mode: PageMode = PageMode.FIRST) -> Page:
        """Move the paginator and replace the view with the authoritative page."""
        actions = {
            PageMode.FIRST: self._paginator.first,
            PageMode.NEXT: self._paginator.next_page,
            PageMode.PREV: self._paginator.previous_page,
            PageMode.ALL: self._paginator.all,
        }
        try:
            page = actions[mode]()
        except BackendUnavailableError:
            self.stale = True
            raise

        self._page = page
        self._records = list(page.window)
        self._pending.difference_update(r.attendance_id for r in page.window)
        self.stale = False
        return page

    def set_date_range(self, start_date: Optional[date], end_date: Optional[date]) -> tuple[AttendanceRecord, ...]:
        page = self._paginator.set_date_range(start_date, end_date)
        if page is not None and self._page is not None:
            self._page = page
        return self.records

    def apply_check_in(self, record: AttendanceRecord) -> None:
        """Prepend a freshly created record to the displayed page."""
        if record in self._records:
            return  # already confirmed by the subscription
        self._records = [r for r in self._records if r.attendance_id != record.attendance_id]
        self._records.insert(0, record)
        self._pending.add(record.attendance_id)
        self._trim()

    def apply_check_out(self, record: AttendanceRecord) -> None:
        if record in self._records:
            return
        self._records = [record if r.attendance_id == record.attendance_id else r for r in self._records]
        self._pending.add(record.attendance_id)

    def reconcile(self, confirmed: Sequence[AttendanceRecord]) -> None:
        """Merge a store snapshot, last write wins per record id."""
        by_id = {r.attendance_id: r for r in confirmed}
        merged = []
        for r in self._records:
            latest = by_id.pop(r.attendance_id, None)
            if latest is not None:
                self._pending.discard(r.attendance_id)
                merged.append(latest)
            else:
                merged.append(r)

        # Newer records only belong on the first page (or the show-all view).
        on_first_page = self._page is None or self._page.show_all or self._page.page_number == 1
        if on_first_page and by_id:
            oldest = min((r.cursor for r in merged), default=None)
            fresh = [r for r in by_id.values() if oldest is None or r.cursor > oldest]
            merged.extend(fresh)
            merged.sort(key=lambda r: r.cursor, reverse=True)

        self._records = merged
        self._trim()
        self.stale = False

    def _on_error(self, exc: Exception) -> None:
        logger.warning("Attendance subscription failed, serving cached view: %s", exc)
        self.stale = True

    def attach(self, repository: AttendanceRepository, *, limit: Optional[int] = None) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = repository.subscribe(
            self.reconcile,
            self._on_error,
            teacher_id=self._paginator.attendance_filter.teacher_id,
            limit=limit,
        )

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def snapshot(self) -> dict:
        page = self._page
        payload = page.to_dict() if page is not None else {"page": 1, "total_pages": 1, "has_more": False}
        payload["records"] = [r.to_dict() for r in self.records]
        payload["stale"] = self.stale
        payload["pending"] = sorted(self._pending)
        return payload


class ProjectionRegistry:
    """One projection per signed-in viewer.

    Views are torn down at logout, after ``idle_ttl`` seconds without a
    request, or when more than ``max_views`` are held (least recently used
    first). Sessions that expire without a logout are reclaimed that way.
    """

    def __init__(
        self,
        service: "AttendanceService",
        repository: AttendanceRepository,
        *,
        idle_ttl: float = 1800.0,
        max_views: int = 200,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._service = service
        self._repository = repository
        self._idle_ttl = float(idle_ttl)
        self._max_views = int(max_views)
        self._clock = clock
        # viewer id -> (projection, last used); oldest first
        self._views: OrderedDict[str, tuple[AttendanceProjection, float]] = OrderedDict()
        self._lock = threading.Lock()

    def _evict(self, now: float) -> list[AttendanceProjection]:
        evicted = []
        for viewer_id, (view, last_used) in list(self._views.items()):
            if now - last_used < self._idle_ttl:
                break
            del self._views[viewer_id]
            evicted.append(view)
        while len(self._views) > self._max_views:
            _, (view, _) = self._views.popitem(last=False)
            evicted.append(view)
        return evicted

    def for_viewer(self, viewer_id: str, attendance_filter: AttendanceFilter) -> AttendanceProjection:
        now = self._clock()
        with self._lock:
            evicted = []
            entry = self._views.pop(viewer_id, None)
            view = entry[0] if entry else None
            if view is not None and view.teacher_scope != attendance_filter.teacher_id:
                # Role changed since the view was built.
                evicted.append(view)
                view = None
            if view is None:
                view = AttendanceProjection(self._service.paginator(attendance_filter))
                view.attach(self._repository, limit=self._service.page_size)
            self._views[viewer_id] = (view, now)
            evicted.extend(self._evict(now))

        for old in evicted:
            old.detach()
        if evicted:
            logger.debug("Released %s attendance view(s), %s held", len(evicted), len(self._views))
        return view

    def drop(self, viewer_id: str) -> None:
        with self._lock:
            entry = self._views.pop(viewer_id, None)
        if entry is not None:
            entry[0].detach()

    def __len__(self) -> int:
        return len(self._views)
