from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..database.document_store import ErrorCallback, Unsubscribe
from .model import Announcement


class AnnouncementRepository(Protocol):
    def get(self, announcement_id: str) -> Optional[Announcement]:
        raise NotImplementedError

    def create(self, *, text: str, date: str, author_id: str) -> Announcement:
        raise NotImplementedError

    def update_fields(self, announcement_id: str, **fields) -> None:
        raise NotImplementedError

    def delete(self, announcement_id: str) -> None:
        raise NotImplementedError

    def list_all(self) -> Sequence[Announcement]:
        """All announcements, newest first."""
        raise NotImplementedError

    def subscribe(
        self,
        on_change: Callable[[list[Announcement]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        raise NotImplementedError
