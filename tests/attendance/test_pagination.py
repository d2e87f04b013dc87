from __future__ import annotations

from datetime import date, datetime

import pytest

from school_attendance.attendance.pagination import AttendanceFilter, filter_by_date_range
from school_attendance.attendance.service import AttendanceService


def seed_days(service, teacher_id, days, month=1):
    for day in days:
        service.attempt_check_in(teacher_id, now=datetime(2025, month, day, 7, 30))


def dates(page):
    return [r.work_date.day for r in page.items]


@pytest.fixture
def twelve(attendance_service):
    seed_days(attendance_service, "t1", range(1, 13))
    return attendance_service


def test_forward_pages_of_five_over_twelve_records(twelve):
    pager = twelve.paginator(AttendanceFilter(teacher_id="t1"))

    first = pager.first()
    second = pager.next_page()
    third = pager.next_page()

    assert [len(p.items) for p in (first, second, third)] == [5, 5, 2]
    assert [p.has_more for p in (first, second, third)] == [True, True, False]
    assert [p.page_number for p in (first, second, third)] == [1, 2, 3]
    assert dates(first) == [12, 11, 10, 9, 8]
    assert dates(third) == [2, 1]
    assert third.total == 12
    assert third.total_pages == 3


def test_next_on_last_page_stays_put(twelve):
    pager = twelve.paginator(AttendanceFilter(teacher_id="t1"))
    pager.first()
    pager.next_page()
    last = pager.next_page()

    assert pager.next_page() is last


def test_backward_from_page_three_matches_original_page_two(twelve):
    pager = twelve.paginator(AttendanceFilter(teacher_id="t1"))
    pager.first()
    original_second = pager.next_page()
    pager.next_page()

    back = pager.previous_page()

    assert back.items == original_second.items
    assert back.page_number == 2
    assert back.has_more is True

    again_first = pager.previous_page()
    assert dates(again_first) == [12, 11, 10, 9, 8]
    assert pager.previous_page() is again_first


def test_exact_multiple_of_page_size_has_no_phantom_page(attendance_service):
    seed_days(attendance_service, "t1", range(1, 11))
    pager = attendance_service.paginator(AttendanceFilter(teacher_id="t1"))

    pager.first()
    second = pager.next_page()

    assert len(second.items) == 5
    assert second.has_more is False
    assert second.total_pages == 2


def test_teacher_view_is_self_scoped_and_head_view_is_not(attendance_service):
    seed_days(attendance_service, "t1", range(1, 4))
    seed_days(attendance_service, "t2", range(1, 3))

    mine = attendance_service.list_page(AttendanceFilter(teacher_id="t2"))
    everyone = attendance_service.list_page(AttendanceFilter())

    assert {r.teacher_id for r in mine.items} == {"t2"}
    assert mine.total == 2
    assert everyone.total == 5
    assert [r.work_date.day for r in everyone.items] == [3, 2, 2, 1, 1]


def test_date_range_filter_is_inclusive_and_keeps_order(twelve):
    page = twelve.list_page(AttendanceFilter(teacher_id="t1", start_date=date(2025, 1, 9), end_date=date(2025, 1, 11)))

    assert dates(page) == [11, 10, 9]
    assert len(page.window) == 5


def test_filter_by_date_range_without_both_bounds_keeps_everything(twelve):
    records = twelve.list_page(AttendanceFilter(teacher_id="t1")).items

    assert filter_by_date_range(records, date(2025, 1, 10), None) == list(records)
    assert filter_by_date_range(records, date(2025, 1, 12), date(2025, 1, 12)) == [records[0]]


def test_date_range_reapplies_to_current_page_without_refetch(twelve, store):
    pager = twelve.paginator(AttendanceFilter(teacher_id="t1"))
    pager.first()
    store.available = False

    page = pager.set_date_range(date(2025, 1, 8), date(2025, 1, 9))

    assert dates(page) == [9, 8]
    assert page.to_dict()["start"] == "2025-01-08"


def test_show_all_returns_everything_under_the_cap(twelve):
    page = twelve.list_all(AttendanceFilter(teacher_id="t1"))

    assert len(page.items) == 12
    assert page.show_all is True
    assert page.truncated is False
    assert page.warning is None
    assert page.total_pages == 1


def test_show_all_warns_when_capped(attendance_repo, fixed_now):
    service = AttendanceService(attendance_repo, clock=fixed_now, show_all_limit=10)
    seed_days(service, "t1", range(1, 13))

    page = service.paginator(AttendanceFilter()).all()

    assert len(page.items) == 10
    assert page.truncated is True
    assert page.warning == "Showing the first 10 records. Use pagination for more."
    assert dates(page)[0] == 12


def test_page_to_dict_shape(twelve):
    payload = twelve.list_page(AttendanceFilter(teacher_id="t1")).to_dict()

    assert payload["page"] == 1
    assert payload["total_pages"] == 3
    assert payload["has_more"] is True
    assert payload["records"][0] == {
        "id": "t1_2025-01-12",
        "teacherId": "t1",
        "date": "2025-01-12",
        "checkInTime": "07:30:00",
        "checkOutTime": None,
        "isLate": False,
    }
