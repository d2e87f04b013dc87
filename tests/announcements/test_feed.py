from __future__ import annotations

from datetime import timedelta

import pytest

from school_attendance.announcements.document_announcement_repository import DocumentAnnouncementRepository
from school_attendance.announcements.feed import AnnouncementFeed
from school_attendance.announcements.model import Announcement
from school_attendance.announcements.service import AnnouncementService
from school_attendance.core.enums import Role
from school_attendance.core.exceptions import BackendUnavailableError
from school_attendance.users.service import SessionUser

HEAD = SessionUser(user_id="h1", name="Head", role=Role.HEAD_TEACHER)


@pytest.fixture
def repo(store):
    return DocumentAnnouncementRepository(store)


@pytest.fixture
def service(repo, fixed_now):
    def clock():
        fixed_now.now = fixed_now.now + timedelta(minutes=1)
        return fixed_now.now

    return AnnouncementService(repo, clock=clock)


def texts(feed):
    return [a.text for a in feed.items]


def test_feed_starts_with_existing_announcements(service, repo):
    service.post(HEAD, "first")
    service.post(HEAD, "second")

    feed = AnnouncementFeed(repo)

    assert texts(feed) == ["second", "first"]


def test_feed_follows_posts_edits_pins_and_deletes(service, repo):
    feed = AnnouncementFeed(repo)
    a = service.post(HEAD, "a")
    b = service.post(HEAD, "b")
    assert texts(feed) == ["b", "a"]

    service.toggle_pin(HEAD, a.announcement_id)
    assert texts(feed) == ["a", "b"]

    service.edit(HEAD, b.announcement_id, "b2")
    assert texts(feed) == ["a", "b2"]

    service.delete(HEAD, a.announcement_id)
    assert texts(feed) == ["b2"]


def test_closed_feed_stops_updating(service, repo, store):
    feed = AnnouncementFeed(repo)
    service.post(HEAD, "before")

    feed.close()
    feed.close()
    service.post(HEAD, "after")

    assert feed.closed is True
    assert texts(feed) == ["before"]
    assert store.subscriber_count("announcements") == 0


class CapturingRepository:
    def __init__(self):
        self.on_change = None
        self.on_error = None

    def subscribe(self, on_change, on_error=None):
        self.on_change, self.on_error = on_change, on_error
        return lambda: None


def test_feed_keeps_last_board_on_error():
    repo = CapturingRepository()
    feed = AnnouncementFeed(repo)
    item = Announcement("x", "kept", "2025-03-03T07:00:00", "h1")
    repo.on_change([item])

    repo.on_error(BackendUnavailableError("offline"))

    assert feed.stale is True
    assert feed.items == [item]

    repo.on_change([])
    assert feed.stale is False
    assert feed.items == []


def test_refresh_picks_up_writes_the_subscription_missed(service, repo, store):
    feed = AnnouncementFeed(repo)
    feed.close()
    service.post(HEAD, "Written elsewhere")

    assert texts(feed) == []
    assert [a.text for a in feed.refresh()] == ["Written elsewhere"]


def test_refresh_during_outage_keeps_the_board(service, repo, store):
    service.post(HEAD, "one")
    service.post(HEAD, "two")
    feed = AnnouncementFeed(repo)

    store.available = False
    with pytest.raises(BackendUnavailableError):
        feed.refresh()

    assert feed.stale is True
    board = feed.board(page=1, page_size=1)
    assert [a.text for a in board.unpinned] == ["two"]
    assert board.total_unpinned == 2
