from __future__ import annotations

from datetime import date, datetime, time

import pytest

from school_attendance.attendance.pagination import AttendanceFilter
from school_attendance.attendance.projection import AttendanceProjection, ProjectionRegistry
from school_attendance.core.enums import PageMode
from school_attendance.core.exceptions import BackendUnavailableError


def seed_days(service, teacher_id, days):
    for day in days:
        service.attempt_check_in(teacher_id, now=datetime(2025, 1, day, 7, 30))


def days(records):
    return [r.work_date.day for r in records]


@pytest.fixture
def projection(attendance_service):
    return AttendanceProjection(attendance_service.paginator(AttendanceFilter(teacher_id="t1")))


def test_local_check_in_is_prepended_and_pending(attendance_service, projection):
    seed_days(attendance_service, "t1", range(1, 8))
    projection.load(PageMode.FIRST)

    record = attendance_service.attempt_check_in("t1", now=datetime(2025, 1, 8, 7, 5))
    projection.apply_check_in(record)

    assert days(projection.records) == [8, 7, 6, 5, 4]
    assert projection.pending_ids == {record.attendance_id}


def test_reconcile_confirms_pending_records(attendance_service, attendance_repo, projection):
    seed_days(attendance_service, "t1", range(1, 3))
    projection.load()
    record = attendance_service.attempt_check_in("t1", now=datetime(2025, 1, 3, 7, 5))
    projection.apply_check_in(record)

    projection.reconcile(attendance_repo.list_recent(teacher_id="t1", limit=5))

    assert projection.pending_ids == frozenset()
    assert days(projection.records) == [3, 2, 1]


def test_reconcile_prefers_the_store_version(attendance_service, attendance_repo, projection):
    seed_days(attendance_service, "t1", [1])
    projection.load()
    stale_local = projection.records[0].with_checkout(time(14, 31))
    projection.apply_check_out(stale_local)

    attendance_service.attempt_check_out("t1", now=datetime(2025, 1, 1, 14, 33))
    projection.reconcile(attendance_repo.list_recent(teacher_id="t1"))

    assert projection.records[0].check_out_time == time(14, 33)
    assert projection.pending_ids == frozenset()


def test_reconcile_is_idempotent(attendance_service, attendance_repo, projection):
    seed_days(attendance_service, "t1", range(1, 4))
    projection.load()
    snapshot = attendance_repo.list_recent(teacher_id="t1", limit=5)

    projection.reconcile(snapshot)
    once = projection.records
    projection.reconcile(snapshot)

    assert projection.records == once


def test_new_records_do_not_appear_on_later_pages(attendance_service, attendance_repo, projection):
    seed_days(attendance_service, "t1", range(1, 13))
    projection.load(PageMode.FIRST)
    projection.load(PageMode.NEXT)
    before = projection.records

    attendance_service.attempt_check_in("t1", now=datetime(2025, 1, 20, 7, 5))
    projection.reconcile(attendance_repo.list_recent(teacher_id="t1", limit=5))

    assert projection.records == before


def test_attached_projection_follows_store_writes(attendance_service, attendance_repo, projection, store):
    seed_days(attendance_service, "t1", range(1, 3))
    projection.load()
    projection.attach(attendance_repo, limit=5)

    record = attendance_service.attempt_check_in("t1", now=datetime(2025, 1, 3, 7, 5))
    projection.apply_check_in(record)

    assert days(projection.records) == [3, 2, 1]
    assert projection.pending_ids == frozenset()
    assert store.subscriber_count("attendance") == 1

    projection.detach()
    assert store.subscriber_count("attendance") == 0
    assert projection.attached is False


def test_outage_keeps_last_good_view(attendance_service, projection, store):
    seed_days(attendance_service, "t1", range(1, 13))
    projection.load()
    cached = projection.records

    store.available = False
    with pytest.raises(BackendUnavailableError):
        projection.load(PageMode.NEXT)

    assert projection.stale is True
    assert projection.records == cached
    snapshot = projection.snapshot()
    assert snapshot["stale"] is True
    assert len(snapshot["records"]) == 5

    store.available = True
    projection.load(PageMode.NEXT)
    assert projection.stale is False
    assert days(projection.records) == [7, 6, 5, 4, 3]


def test_date_range_applies_to_held_records(attendance_service, projection):
    seed_days(attendance_service, "t1", range(1, 6))
    projection.load()

    filtered = projection.set_date_range(date(2025, 1, 2), date(2025, 1, 3))
    assert days(filtered) == [3, 2]

    assert days(projection.set_date_range(None, None)) == [5, 4, 3, 2, 1]


def test_show_all_view_is_not_trimmed_by_local_check_in(attendance_service, projection):
    seed_days(attendance_service, "t1", range(1, 8))
    projection.load(PageMode.ALL)

    record = attendance_service.attempt_check_in("t1", now=datetime(2025, 1, 8, 7, 5))
    projection.apply_check_in(record)

    assert len(projection.records) == 8


def test_registry_keeps_one_view_per_viewer(attendance_service, attendance_repo, store):
    registry = ProjectionRegistry(attendance_service, attendance_repo)

    first = registry.for_viewer("t1", AttendanceFilter(teacher_id="t1"))
    assert registry.for_viewer("t1", AttendanceFilter(teacher_id="t1")) is first
    registry.for_viewer("head", AttendanceFilter())

    assert len(registry) == 2
    assert store.subscriber_count("attendance") == 2

    registry.drop("t1")
    registry.drop("t1")
    assert len(registry) == 1
    assert store.subscriber_count("attendance") == 1


class Ticker:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_registry_releases_idle_views(attendance_service, attendance_repo, store):
    ticker = Ticker()
    registry = ProjectionRegistry(attendance_service, attendance_repo, idle_ttl=60, clock=ticker)
    for n in range(50):
        registry.for_viewer(f"t{n}", AttendanceFilter(teacher_id=f"t{n}"))
    assert store.subscriber_count("attendance") == 50

    ticker.now = 30.0
    kept = registry.for_viewer("t7", AttendanceFilter(teacher_id="t7"))
    ticker.now = 75.0
    registry.for_viewer("head", AttendanceFilter())

    assert len(registry) == 2
    assert store.subscriber_count("attendance") == 2
    assert kept.attached
    assert registry.for_viewer("t7", AttendanceFilter(teacher_id="t7")) is kept


def test_registry_evicts_least_recently_used_views(attendance_service, attendance_repo, store):
    ticker = Ticker()
    registry = ProjectionRegistry(attendance_service, attendance_repo, max_views=3, clock=ticker)
    views = {}
    for name in ("a", "b", "c"):
        ticker.now += 1
        views[name] = registry.for_viewer(name, AttendanceFilter(teacher_id=name))
    ticker.now += 1
    registry.for_viewer("a", AttendanceFilter(teacher_id="a"))

    ticker.now += 1
    registry.for_viewer("d", AttendanceFilter(teacher_id="d"))

    assert len(registry) == 3
    assert store.subscriber_count("attendance") == 3
    assert not views["b"].attached
    assert views["a"].attached and views["c"].attached


def test_registry_rebuilds_a_view_when_the_scope_changes(attendance_service, attendance_repo, store):
    registry = ProjectionRegistry(attendance_service, attendance_repo)
    everyone = registry.for_viewer("head", AttendanceFilter())

    own = registry.for_viewer("head", AttendanceFilter(teacher_id="head"))

    assert own is not everyone
    assert own.teacher_scope == "head"
    assert not everyone.attached
    assert len(registry) == 1
    assert store.subscriber_count("attendance") == 1
