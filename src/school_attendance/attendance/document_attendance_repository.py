from __future__ import annotations

from datetime import date, time
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import format_clock, format_date
from ..core.constants import ATTENDANCE_COLLECTION
from ..database.document_store import Cursor, Document, DocumentStore, ErrorCallback, Unsubscribe
from .model import AttendanceRecord
from .repository import AttendanceRepository


def natural_key(teacher_id: str, work_date: date) -> str:
    """Document id derived from (teacher, day); the store's primary key then
    rejects a second record for the same pair."""
    return f"{teacher_id}_{format_date(work_date)}"


class DocumentAttendanceRepository(AttendanceRepository):
    def __init__(self, store: DocumentStore, *, collection: str = ATTENDANCE_COLLECTION):
        self._store = store
        self._collection = collection

    @staticmethod
    def _scope(teacher_id: Optional[str]) -> Optional[dict]:
        return {"teacherId": teacher_id} if teacher_id else None

    @staticmethod
    def _to_records(docs: Sequence[Document]) -> list[AttendanceRecord]:
        return [AttendanceRecord.from_document(d.doc_id, d.data) for d in docs]

    def get_for_teacher_and_date(self, teacher_id: str, work_date: date) -> Optional[AttendanceRecord]:
        docs = self._store.query_equal(
            self._collection,
            {"teacherId": teacher_id, "date": format_date(work_date)},
        )
        if not docs:
            return None
        return AttendanceRecord.from_document(docs[0].doc_id, docs[0].data)

    def create_checkin(
        self,
        *,
        teacher_id: str,
        work_date: date,
        check_in_time: time,
        is_late: bool,
    ) -> AttendanceRecord:
        record = AttendanceRecord(
            attendance_id="",
            teacher_id=teacher_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=None,
            is_late=is_late,
        )
        doc_id = self._store.insert(
            self._collection,
            record.to_document(),
            doc_id=natural_key(teacher_id, work_date),
        )
        return AttendanceRecord.from_document(doc_id, record.to_document())

    def set_checkout(self, *, attendance_id: str, check_out_time: time) -> None:
        self._store.update(self._collection, attendance_id, {"checkOutTime": format_clock(check_out_time)})

    def list_recent(
        self,
        *,
        teacher_id: Optional[str] = None,
        limit: Optional[int] = None,
        after: Optional[Cursor] = None,
    ) -> Sequence[AttendanceRecord]:
        docs = self._store.query_range(
            self._collection,
            order_field="date",
            direction="desc",
            limit=limit,
            after=after,
            filters=self._scope(teacher_id),
        )
        return self._to_records(docs)

    def count(self, *, teacher_id: Optional[str] = None) -> int:
        return self._store.count(self._collection, self._scope(teacher_id))

    def subscribe(
        self,
        on_change: Callable[[list[AttendanceRecord]], None],
        on_error: Optional[ErrorCallback] = None,
        *,
        teacher_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Unsubscribe:
        return self._store.subscribe(
            self._collection,
            lambda docs: on_change(self._to_records(docs)),
            on_error,
            filters=self._scope(teacher_id),
            order_field="date",
            direction="desc",
            limit=limit,
        )
