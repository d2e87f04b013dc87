"""Document store contract.

The services only ever talk to a ``DocumentStore``: a collection of JSON-like
documents addressed by id, queried by equality filters or by an ordered range
with a "start after" cursor. Two access modes are exposed explicitly:

- one-shot queries (``get``, ``query_equal``, ``query_range``, ``count``);
- streaming subscriptions (``subscribe``) that deliver the full matching
  snapshot on subscribe and after every write to the collection.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from ..core.exceptions import BackendUnavailableError

logger = logging.getLogger(__name__)

# (value of the order field, document id) of the last item already seen
Cursor = tuple[Any, str]


@dataclass(frozen=True)
class Document:
    doc_id: str
    data: dict

    def cursor(self, order_field: str) -> Cursor:
        return (self.data.get(order_field), self.doc_id)


ChangeCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class DocumentStore(Protocol):
    def insert(self, collection: str, data: Mapping[str, Any], *, doc_id: Optional[str] = None) -> str:
        """Create a document; raises DuplicateRecordError when ``doc_id`` is taken."""
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        """Merge ``fields`` into an existing document; raises RecordNotFoundError."""
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def query_equal(self, collection: str, filters: Optional[Mapping[str, Any]] = None) -> list[Document]:
        raise NotImplementedError

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
        raise NotImplementedError

    def count(self, collection: str, filters: Optional[Mapping[str, Any]] = None) -> int:
        raise NotImplementedError

    def subscribe(
        self,
        collection: str,
        on_change: ChangeCallback,
        on_error: Optional[ErrorCallback] = None,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_field: Optional[str] = None,
        direction: str = "desc",
        limit: Optional[int] = None,
    ) -> Unsubscribe:
        raise NotImplementedError


def check_direction(direction: str) -> bool:
    """Return True for descending order."""
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unsupported sort direction: {direction!r}")
    return direction == "desc"


def matches(data: Mapping[str, Any], filters: Optional[Mapping[str, Any]]) -> bool:
    if not filters:
        return True
    return all(data.get(k) == v for k, v in filters.items())


def _order_key(value: Any, doc_id: str) -> tuple:
    # None sorts before any value so missing fields end up last in desc order
    return (value is not None, value if value is not None else "", doc_id)


def order_documents(
    docs: Sequence[Document],
    *,
    order_field: str,
    direction: str = "desc",
    limit: Optional[int] = None,
    after: Optional[Cursor] = None,
) -> list[Document]:
    """Sort by (order_field, doc_id), skip up to ``after`` and apply ``limit``."""
    descending = check_direction(direction)
    ordered = sorted(docs, key=lambda d: _order_key(d.data.get(order_field), d.doc_id), reverse=descending)

    if after is not None:
        pivot = _order_key(after[0], after[1])
        if descending:
            ordered = [d for d in ordered if _order_key(d.data.get(order_field), d.doc_id) < pivot]
        else:
            ordered = [d for d in ordered if _order_key(d.data.get(order_field), d.doc_id) > pivot]

    if limit is not None:
        ordered = ordered[: max(int(limit), 0)]
    return ordered


@dataclass(frozen=True)
class _Subscription:
    collection: str
    on_change: ChangeCallback
    on_error: Optional[ErrorCallback]
    filters: Optional[dict]
    order_field: Optional[str]
    direction: str
    limit: Optional[int]


class SubscribableStoreMixin:
    """In-process listener registry shared by the store implementations.

    Listeners of a collection receive a fresh snapshot after every write made
    through this store instance.
    """

    def __init__(self) -> None:
        self._subs_lock = threading.Lock()
        self._subs: dict[int, _Subscription] = {}
        self._next_token = 0

    def subscribe(
        self,
        collection: str,
        on_change: ChangeCallback,
        on_error: Optional[ErrorCallback] = None,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_field: Optional[str] = None,
        direction: str = "desc",
        limit: Optional[int] = None,
    ) -> Unsubscribe:
        check_direction(direction)
        sub = _Subscription(
            collection=collection,
            on_change=on_change,
            on_error=on_error,
            filters=dict(filters) if filters else None,
            order_field=order_field,
            direction=direction,
            limit=limit,
        )
        with self._subs_lock:
            self._next_token += 1
            token = self._next_token
            self._subs[token] = sub

        self._deliver(sub)

        def unsubscribe() -> None:
            with self._subs_lock:
                self._subs.pop(token, None)

        return unsubscribe

    def subscriber_count(self, collection: Optional[str] = None) -> int:
        with self._subs_lock:
            return sum(1 for s in self._subs.values() if collection is None or s.collection == collection)

    def _notify(self, collection: str) -> None:
        with self._subs_lock:
            subs = [s for s in self._subs.values() if s.collection == collection]
        for sub in subs:
            self._deliver(sub)

    def _deliver(self, sub: _Subscription) -> None:
        try:
            if sub.order_field:
                docs = self.query_range(
                    sub.collection,
                    order_field=sub.order_field,
                    direction=sub.direction,
                    limit=sub.limit,
                    filters=sub.filters,
                )
            else:
                docs = self.query_equal(sub.collection, sub.filters)
                if sub.limit is not None:
                    docs = docs[: sub.limit]
        except BackendUnavailableError as exc:
            if sub.on_error:
                sub.on_error(exc)
            else:
                logger.error("Snapshot for %s failed: %s", sub.collection, exc)
            return

        try:
            sub.on_change(docs)
        except Exception:
            logger.exception("Listener on %s raised while handling a snapshot", sub.collection)
