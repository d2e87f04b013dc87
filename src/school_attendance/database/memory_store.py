from __future__ import annotations

import copy
import threading
import uuid
from typing import Any, Mapping, Optional

from ..core.exceptions import BackendUnavailableError, DuplicateRecordError, RecordNotFoundError
from .document_store import Cursor, Document, SubscribableStoreMixin, matches, order_documents


class InMemoryDocumentStore(SubscribableStoreMixin):
    """Process-local document store used by tests and ``STORE_BACKEND=memory``.

    Setting ``available = False`` makes every call raise BackendUnavailableError,
    which is how tests exercise the offline paths.
    """

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict]] = {}
        self.available = True

    def _ensure_available(self) -> None:
        if not self.available:
            raise BackendUnavailableError("The document store is unavailable. Please try again later.")

    def _docs(self, collection: str) -> dict[str, dict]:
        return self._collections.setdefault(collection, {})

    def insert(self, collection: str, data: Mapping[str, Any], *, doc_id: Optional[str] = None) -> str:
        self._ensure_available()
        with self._lock:
            docs = self._docs(collection)
            doc_id = doc_id or uuid.uuid4().hex
            if doc_id in docs:
                raise DuplicateRecordError(f"{collection}/{doc_id} already exists")
            docs[doc_id] = copy.deepcopy(dict(data))
        self._notify(collection)
        return doc_id

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        self._ensure_available()
        with self._lock:
            docs = self._docs(collection)
            if doc_id not in docs:
                raise RecordNotFoundError(f"{collection}/{doc_id} does not exist")
            docs[doc_id].update(copy.deepcopy(dict(fields)))
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        self._ensure_available()
        with self._lock:
            if self._docs(collection).pop(doc_id, None) is None:
                raise RecordNotFoundError(f"{collection}/{doc_id} does not exist")
        self._notify(collection)

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        self._ensure_available()
        with self._lock:
            data = self._docs(collection).get(doc_id)
            return Document(doc_id, copy.deepcopy(data)) if data is not None else None

    def query_equal(self, collection: str, filters: Optional[Mapping[str, Any]] = None) -> list[Document]:
        self._ensure_available()
        with self._lock:
            return [
                Document(doc_id, copy.deepcopy(data))
                for doc_id, data in self._docs(collection).items()
                if matches(data, filters)
            ]

    def query_range(
        self,
        collection: str,
        *,
        order_field: str,
        direction: str = "desc",
        limit: Optional[int] = None,
        after: Optional[Cursor] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> list[Document]:
        docs = self.query_equal(collection, filters)
        return order_documents(docs, order_field=order_field, direction=direction, limit=limit, after=after)

    def count(self, collection: str, filters: Optional[Mapping[str, Any]] = None) -> int:
        return len(self.query_equal(collection, filters))
