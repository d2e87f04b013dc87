from __future__ import annotations

from datetime import date, datetime, time

import pytest

from school_attendance.attendance.document_attendance_repository import DocumentAttendanceRepository, natural_key
from school_attendance.core.enums import TodayStatus
from school_attendance.core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    BackendUnavailableError,
    NotCheckedInError,
    OutsideWindowError,
    ValidationError,
)
from school_attendance.attendance.service import AttendanceService


def at(hour, minute=0, second=0, microsecond=0, day=3):
    return datetime(2025, 3, day, hour, minute, second, microsecond)


@pytest.mark.parametrize(
    "now",
    [at(7, 0, 0), at(7, 30), at(7, 59, 59), at(7, 59, 59, 999999)],
)
def test_check_in_inside_window_succeeds(attendance_service, now):
    record = attendance_service.attempt_check_in("t1", now=now)

    assert record.teacher_id == "t1"
    assert record.work_date == date(2025, 3, 3)
    assert record.check_out_time is None
    assert record.is_late is False


@pytest.mark.parametrize(
    "now",
    [at(0, 0), at(6, 59, 59), at(6, 59, 59, 999999), at(8, 0, 0), at(8, 0, 1), at(14, 35)],
)
def test_check_in_outside_window_is_rejected(attendance_service, attendance_repo, now):
    with pytest.raises(OutsideWindowError) as exc:
        attendance_service.attempt_check_in("t1", now=now)

    assert "7:00 AM and 8:00 AM" in str(exc.value)
    assert attendance_repo.count() == 0


def test_second_check_in_same_day_is_rejected(attendance_service):
    attendance_service.attempt_check_in("t1", now=at(7, 10))

    with pytest.raises(AlreadyCheckedInError):
        attendance_service.attempt_check_in("t1", now=at(7, 20))


def test_check_in_next_day_is_allowed(attendance_service):
    attendance_service.attempt_check_in("t1", now=at(7, 10, day=3))
    record = attendance_service.attempt_check_in("t1", now=at(7, 10, day=4))

    assert record.work_date == date(2025, 3, 4)


def test_check_in_time_is_stored_to_the_second(attendance_service, store):
    record = attendance_service.attempt_check_in("t1", now=at(7, 15, 42, 123456))

    assert record.check_in_time == time(7, 15, 42)
    doc = store.get("attendance", record.attendance_id)
    assert doc.data["checkInTime"] == "07:15:42"
    assert doc.data["checkOutTime"] is None


def test_record_id_is_teacher_and_date(attendance_service):
    record = attendance_service.attempt_check_in("t1", now=at(7, 15))

    assert record.attendance_id == natural_key("t1", date(2025, 3, 3)) == "t1_2025-03-03"


class BlindAttendanceRepository(DocumentAttendanceRepository):
    """Never sees an existing record, like two submissions racing each other."""

    def get_for_teacher_and_date(self, teacher_id, work_date):
        return None


def test_racing_check_in_is_rejected_by_the_store_key(store, fixed_now):
    service = AttendanceService(BlindAttendanceRepository(store), clock=fixed_now)
    service.attempt_check_in("t1", now=at(7, 10))

    with pytest.raises(AlreadyCheckedInError):
        service.attempt_check_in("t1", now=at(7, 10))

    assert store.count("attendance") == 1


def test_check_out_without_check_in_is_rejected(attendance_service):
    with pytest.raises(NotCheckedInError):
        attendance_service.attempt_check_out("t1", now=at(14, 30))


def test_check_out_twice_is_rejected(attendance_service):
    attendance_service.attempt_check_in("t1", now=at(7, 10))

    record = attendance_service.attempt_check_out("t1", now=at(14, 31, 5))
    assert record.check_out_time == time(14, 31, 5)

    with pytest.raises(AlreadyCheckedOutError):
        attendance_service.attempt_check_out("t1", now=at(14, 32))


@pytest.mark.parametrize("now", [at(14, 29, 59), at(14, 40, 0), at(7, 30), at(18, 0)])
def test_check_out_outside_window_is_rejected(attendance_service, now):
    attendance_service.attempt_check_in("t1", now=at(7, 10))

    with pytest.raises(OutsideWindowError) as exc:
        attendance_service.attempt_check_out("t1", now=now)

    assert "2:30 PM and 2:40 PM" in str(exc.value)


def test_check_out_window_is_checked_before_state(attendance_service):
    with pytest.raises(OutsideWindowError):
        attendance_service.attempt_check_out("t1", now=at(9, 0))


def test_check_out_only_touches_check_out_time(attendance_service, store):
    created = attendance_service.attempt_check_in("t1", now=at(7, 10))
    before = dict(store.get("attendance", created.attendance_id).data)

    attendance_service.attempt_check_out("t1", now=at(14, 39, 59))

    after = store.get("attendance", created.attendance_id).data
    assert after["checkOutTime"] == "14:39:59"
    assert {k: v for k, v in after.items() if k != "checkOutTime"} == {
        k: v for k, v in before.items() if k != "checkOutTime"
    }


def test_all_rejections_are_validation_errors():
    for exc_type in (OutsideWindowError, AlreadyCheckedInError, NotCheckedInError, AlreadyCheckedOutError):
        assert issubclass(exc_type, ValidationError)
    assert not issubclass(BackendUnavailableError, ValidationError)


def test_today_status_follows_the_day(attendance_service, fixed_now):
    assert attendance_service.today_status("t1") == (TodayStatus.NOT_CHECKED_IN, None)

    attendance_service.attempt_check_in("t1")
    status, record = attendance_service.today_status("t1")
    assert status == TodayStatus.CHECKED_IN
    assert record.check_in_time == time(7, 30)

    fixed_now.now = at(14, 35)
    attendance_service.attempt_check_out("t1")
    status, record = attendance_service.today_status("t1")
    assert status == TodayStatus.CHECKED_OUT
    assert record.check_out_time == time(14, 35)


def test_store_outage_is_not_a_rejection(attendance_service, store):
    store.available = False

    with pytest.raises(BackendUnavailableError):
        attendance_service.attempt_check_in("t1", now=at(7, 10))
