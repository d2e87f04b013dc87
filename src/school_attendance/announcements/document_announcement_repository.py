from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..core.constants import ANNOUNCEMENTS_COLLECTION
from ..database.document_store import Document, DocumentStore, ErrorCallback, Unsubscribe
from .model import Announcement
from .repository import AnnouncementRepository

_FIELD_NAMES = {"text": "text", "date": "date", "pinned": "pinned"}


class DocumentAnnouncementRepository(AnnouncementRepository):
    def __init__(self, store: DocumentStore, *, collection: str = ANNOUNCEMENTS_COLLECTION):
        self._store = store
        self._collection = collection

    @staticmethod
    def _to_items(docs: Sequence[Document]) -> list[Announcement]:
        return [Announcement.from_document(d.doc_id, d.data) for d in docs]

    def get(self, announcement_id: str) -> Optional[Announcement]:
        doc = self._store.get(self._collection, announcement_id)
        return Announcement.from_document(doc.doc_id, doc.data) if doc else None

    def create(self, *, text: str, date: str, author_id: str) -> Announcement:
        item = Announcement(announcement_id="", text=text, date=date, author_id=author_id)
        doc_id = self._store.insert(self._collection, item.to_document())
        return Announcement.from_document(doc_id, item.to_document())

    def update_fields(self, announcement_id: str, **fields) -> None:
        unknown = set(fields) - set(_FIELD_NAMES)
        if unknown:
            raise ValueError(f"Unknown announcement fields: {sorted(unknown)}")
        self._store.update(self._collection, announcement_id, {_FIELD_NAMES[k]: v for k, v in fields.items()})

    def delete(self, announcement_id: str) -> None:
        self._store.delete(self._collection, announcement_id)

    def list_all(self) -> Sequence[Announcement]:
        docs = self._store.query_range(self._collection, order_field="date", direction="desc")
        return self._to_items(docs)

    def subscribe(
        self,
        on_change: Callable[[list[Announcement]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        return self._store.subscribe(
            self._collection,
            lambda docs: on_change(self._to_items(docs)),
            on_error,
            order_field="date",
            direction="desc",
        )
