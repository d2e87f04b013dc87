from __future__ import annotations

from datetime import datetime

import pytest
import requests

from school_attendance.attendance.document_attendance_repository import DocumentAttendanceRepository
from school_attendance.attendance.service import AttendanceService
from school_attendance.database.memory_store import InMemoryDocumentStore
from school_attendance.users.document_user_repository import DocumentUserRepository
from school_attendance.users.service import UserService


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingChannel:
    """Push channel double; tokens listed in ``fail_for`` raise like an unreachable gateway."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail_for: set[str] = set()

    def send(self, token, *, title, body, data=None):
        if token in self.fail_for:
            raise requests.ConnectionError(f"unreachable: {token}")
        self.sent.append((token, title, body))


@pytest.fixture
def fixed_now() -> FixedClock:
    return FixedClock(datetime(2025, 3, 3, 7, 30, 0))


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def attendance_repo(store) -> DocumentAttendanceRepository:
    return DocumentAttendanceRepository(store)


@pytest.fixture
def attendance_service(attendance_repo, fixed_now) -> AttendanceService:
    return AttendanceService(attendance_repo, clock=fixed_now)


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def user_service(store) -> UserService:
    return UserService(DocumentUserRepository(store))
