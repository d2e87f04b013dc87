from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.exceptions import BackendUnavailableError
from ..database.document_store import Unsubscribe
from .model import Announcement, sort_for_display
from .repository import AnnouncementRepository
from .service import AnnouncementBoard, build_board

logger = logging.getLogger(__name__)


class AnnouncementFeed:
    """Live announcement board backed by a store subscription.

    Each delivery is the full set of announcements. Entries are merged per id
    (the delivered version wins) and ids missing from the delivery are
    dropped. On a failed delivery the last good board is kept.
    """

    def __init__(self, repository: AnnouncementRepository):
        self._repository = repository
        self._by_id: dict[str, Announcement] = {}
        self.stale = False
        self._unsubscribe: Optional[Unsubscribe] = repository.subscribe(self._on_change, self._on_error)

    @property
    def items(self) -> list[Announcement]:
        return sort_for_display(self._by_id.values())

    @property
    def closed(self) -> bool:
        return self._unsubscribe is None

    def _on_change(self, delivered: Sequence[Announcement]) -> None:
        self._by_id = {a.announcement_id: a for a in delivered}
        self.stale = False

    def refresh(self) -> list[Announcement]:
        """Re-read the board from the store.

        Writes made by other processes never reach the subscription, so the
        board is re-read per request. On an outage the feed goes stale and the
        error propagates; the previous items stay in place.
        """
        try:
            delivered = self._repository.list_all()
        except BackendUnavailableError:
            self.stale = True
            raise
        self._on_change(delivered)
        return self.items

    def board(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> AnnouncementBoard:
        return build_board(self._by_id.values(), page, page_size)

    def _on_error(self, exc: Exception) -> None:
        logger.warning("Announcement feed failed, keeping last board: %s", exc)
        self.stale = True

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
