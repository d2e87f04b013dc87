from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from math import ceil
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, RecordNotFoundError
from ..notifications.service import NotificationService
from ..users.service import SessionUser
from .model import Announcement, sort_for_display
from .repository import AnnouncementRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnouncementBoard:
    """Pinned announcements plus one page of the unpinned ones."""

    pinned: tuple[Announcement, ...]
    unpinned: tuple[Announcement, ...]
    page: int
    page_size: int
    total_unpinned: int

    @property
    def total_pages(self) -> int:
        return max(ceil(self.total_unpinned / self.page_size), 1)

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total_unpinned

    def to_dict(self) -> dict:
        return {
            "pinned": [a.to_dict() for a in self.pinned],
            "announcements": [a.to_dict() for a in self.unpinned],
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total_unpinned,
            "total_pages": self.total_pages,
            "has_more": self.has_more,
        }


def build_board(items: Iterable[Announcement], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> AnnouncementBoard:
    page = max(int(page), 1)
    page_size = int(page_size)

    ordered = sort_for_display(items)
    pinned = [a for a in ordered if a.pinned]
    unpinned = [a for a in ordered if not a.pinned]

    start = (page - 1) * page_size
    return AnnouncementBoard(
        pinned=tuple(pinned),
        unpinned=tuple(unpinned[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_unpinned=len(unpinned),
    )


class AnnouncementService:
    """Head teachers post; only the author may edit, delete or (un)pin."""

    def __init__(
        self,
        announcements: AnnouncementRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        notifications: Optional[NotificationService] = None,
        recipients: Optional[Callable[..., list[str]]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._announcements = announcements
        self._clock = clock
        self._notifications = notifications
        self._recipients = recipients
        self._page_size = int(page_size)

    def _timestamp(self) -> str:
        return self._clock().isoformat(timespec="seconds")

    def _require_owned(self, actor: SessionUser, announcement_id: str) -> Announcement:
        item = self._announcements.get(announcement_id)
        if not item:
            raise RecordNotFoundError("Announcement not found")
        if item.author_id != actor.user_id:
            logger.info("User %s denied access to announcement %s", actor.user_id, announcement_id)
            raise AuthorizationError("You can only modify your own announcements.")
        return item

    def post(self, author: SessionUser, text: str) -> Announcement:
        if author.role != Role.HEAD_TEACHER:
            raise AuthorizationError("Only head teachers can post announcements.")
        text = require_non_empty(text, "Announcement")

        item = self._announcements.create(text=text, date=self._timestamp(), author_id=author.user_id)
        logger.info("Announcement %s posted by %s", item.announcement_id, author.user_id)
        self._broadcast(author, item)
        return item

    def _broadcast(self, author: SessionUser, item: Announcement) -> None:
        if self._notifications is None or self._recipients is None:
            return
        tokens = self._recipients(exclude_user_id=author.user_id)
        if not tokens:
            return
        self._notifications.broadcast(
            tokens,
            title=f"New announcement from {author.name}",
            body=item.text[:120],
            data={"announcementId": item.announcement_id},
        )

    def edit(self, actor: SessionUser, announcement_id: str, text: str) -> Announcement:
        item = self._require_owned(actor, announcement_id)
        text = require_non_empty(text, "Announcement")
        date = self._timestamp()
        self._announcements.update_fields(announcement_id, text=text, date=date)
        return item.edited(text, date)

    def delete(self, actor: SessionUser, announcement_id: str) -> None:
        self._require_owned(actor, announcement_id)
        self._announcements.delete(announcement_id)
        logger.info("Announcement %s deleted by %s", announcement_id, actor.user_id)

    def toggle_pin(self, actor: SessionUser, announcement_id: str) -> Announcement:
        item = self._require_owned(actor, announcement_id)
        pinned = not item.pinned
        self._announcements.update_fields(announcement_id, pinned=pinned)
        return replace(item, pinned=pinned)

    @property
    def page_size(self) -> int:
        return self._page_size

    def list_board(self, page: int = 1, page_size: Optional[int] = None) -> AnnouncementBoard:
        return build_board(self._announcements.list_all(), page, page_size or self._page_size)
