from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Any, Callable, Optional

from .announcements.document_announcement_repository import DocumentAnnouncementRepository
from .announcements.feed import AnnouncementFeed
from .announcements.service import AnnouncementService
from .attendance.document_attendance_repository import DocumentAttendanceRepository
from .attendance.policy import AttendancePolicy
from .attendance.projection import ProjectionRegistry
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .database.document_store import DocumentStore
from .database.memory_store import InMemoryDocumentStore
from .database.mysql_document_store import MySQLDocumentStore
from .notifications.channel import LoggingChannel, NotificationChannel, WebPushChannel
from .notifications.service import NotificationService
from .reports.service import ReportService
from .users.document_user_repository import DocumentUserRepository
from .users.service import AuthService, UserService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    store: DocumentStore

    users_repo: DocumentUserRepository
    attendance_repo: DocumentAttendanceRepository
    announcements_repo: DocumentAnnouncementRepository

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    announcement_service: AnnouncementService
    announcement_feed: AnnouncementFeed
    notification_service: NotificationService
    report_service: ReportService
    projections: ProjectionRegistry


def build_store(settings: Any) -> tuple[Optional[DatabaseConnection], DocumentStore]:
    backend = str(getattr(settings, "STORE_BACKEND", "mysql")).lower()
    if backend == "memory":
        return None, InMemoryDocumentStore()
    if backend != "mysql":
        raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")

    conn = DatabaseConnection(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))
    return conn, MySQLDocumentStore(conn)


def build_channel(settings: Any) -> NotificationChannel:
    endpoint = getattr(settings, "PUSH_ENDPOINT", "")
    if not endpoint:
        return LoggingChannel()
    return WebPushChannel(endpoint, getattr(settings, "PUSH_SERVER_KEY", ""))


def build_container(
    settings: Any,
    *,
    store: Optional[DocumentStore] = None,
    clock: Optional[Callable[[], datetime]] = None,
    channel: Optional[NotificationChannel] = None,
) -> Container:
    conn = None
    if store is None:
        conn, store = build_store(settings)
    if clock is None:
        clock = partial(now_local, getattr(settings, "SCHOOL_TIMEZONE", "") or None)

    page_size = int(getattr(settings, "PAGE_SIZE", 5))
    show_all_limit = int(getattr(settings, "SHOW_ALL_LIMIT", 100))

    users_repo = DocumentUserRepository(store)
    attendance_repo = DocumentAttendanceRepository(store)
    announcements_repo = DocumentAnnouncementRepository(store)

    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo)
    notification_service = NotificationService(channel or build_channel(settings))
    attendance_service = AttendanceService(
        attendance_repo,
        policy=AttendancePolicy.from_settings(settings),
        clock=clock,
        page_size=page_size,
        show_all_limit=show_all_limit,
    )
    announcement_service = AnnouncementService(
        announcements_repo,
        clock=clock,
        notifications=notification_service,
        recipients=user_service.notification_targets,
        page_size=page_size,
    )
    report_service = ReportService(
        attendance_repo,
        teacher_names=user_service.teacher_names,
        batch_size=show_all_limit,
        max_rows=int(getattr(settings, "REPORT_MAX_ROWS", 5000)),
    )

    logger.debug("Container built (store=%s)", type(store).__name__)
    return Container(
        conn=conn,
        store=store,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        announcements_repo=announcements_repo,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        announcement_service=announcement_service,
        announcement_feed=AnnouncementFeed(announcements_repo),
        notification_service=notification_service,
        report_service=report_service,
        projections=ProjectionRegistry(
            attendance_service,
            attendance_repo,
            idle_ttl=float(getattr(settings, "PROJECTION_IDLE_TTL", 1800)),
            max_views=int(getattr(settings, "PROJECTION_MAX_VIEWS", 200)),
        ),
    )
