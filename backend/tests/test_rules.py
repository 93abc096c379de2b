from datetime import datetime, timedelta, timezone

import pytest

from taskflow.schemas import PageResponse, ProjectHealth, TaskStatus
from taskflow.services.stats_service import classify_project, percentage
from taskflow.services.task_queries import MAX_PAGE_INDEX, MAX_PAGE_SIZE, build_page_request
from taskflow.time_utils import as_utc, is_overdue, today_range, week_range


@pytest.mark.parametrize(
    "part, whole, expected",
    [
        (0, 0, 0.0),
        (5, 0, 0.0),
        (0, 4, 0.0),
        (1, 3, 33.33),
        (2, 3, 66.67),
        (1, 8, 12.5),
        (3, 3, 100.0),
    ],
)
def test_percentage(part, whole, expected):
    assert percentage(part, whole) == expected


@pytest.mark.parametrize(
    "total, completed, overdue, expected",
    [
        (0, 0, 0, ProjectHealth.NO_TASKS),
        (10, 3, 4, ProjectHealth.DELAYED),
        # exactly 30% overdue is not DELAYED
        (10, 7, 3, ProjectHealth.AT_RISK),
        (10, 3, 2, ProjectHealth.AT_RISK),
        (10, 4, 0, ProjectHealth.AT_RISK),
        (10, 5, 0, ProjectHealth.ON_TRACK),
    ],
)
def test_classify_project(total, completed, overdue, expected):
    assert classify_project(total, completed, overdue) == expected


def test_page_response_flags():
    page = PageResponse[int].of([1, 2, 3], page=0, size=3, total=7)
    assert page.total_pages == 3
    assert page.first is True
    assert page.last is False

    last = PageResponse[int].of([7], page=2, size=3, total=7)
    assert last.last is True
    assert last.empty is False

    nothing = PageResponse[int].of([], page=0, size=10, total=0)
    assert nothing.total_pages == 0
    assert nothing.first is True
    assert nothing.last is True
    assert nothing.empty is True

    dumped = nothing.model_dump(by_alias=True)
    assert set(dumped) == {
        "content",
        "pageNumber",
        "pageSize",
        "totalElements",
        "totalPages",
        "first",
        "last",
        "empty",
    }


def test_build_page_request_normalizes():
    request = build_page_request(page=2, size=1000, sort_by="priority", sort_dir="AsC")
    assert request.size == MAX_PAGE_SIZE
    assert request.sort_by == "priority"
    assert request.ascending is True
    assert request.offset == 2 * MAX_PAGE_SIZE

    fallback = build_page_request(sort_by="password", sort_dir=None)
    assert fallback.sort_by == "createdAt"
    assert fallback.ascending is False

    huge = build_page_request(page=10**30, size=MAX_PAGE_SIZE)
    assert huge.page == MAX_PAGE_INDEX
    assert huge.offset <= 2**63 - 1


def test_is_overdue_rules():
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    past = now - timedelta(minutes=1)
    assert is_overdue(past, TaskStatus.TODO, now) is True
    assert is_overdue(past, TaskStatus.DONE, now) is False
    assert is_overdue(None, TaskStatus.TODO, now) is False
    assert is_overdue(now + timedelta(minutes=1), TaskStatus.REVIEW, now) is False
    # naive values read back from SQLite are treated as UTC
    assert is_overdue(past.replace(tzinfo=None), TaskStatus.IN_PROGRESS, now) is True


def test_day_and_week_ranges():
    now = datetime(2026, 3, 1, 18, 30, tzinfo=timezone.utc)
    start, end = today_range(now)
    assert start == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert end == datetime(2026, 3, 2, tzinfo=timezone.utc)
    week_start, week_end = week_range(now)
    assert week_start == start
    assert week_end == datetime(2026, 3, 8, tzinfo=timezone.utc)


def test_as_utc_converts_offsets():
    local = datetime(2026, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=3)))
    assert as_utc(local) == datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    assert as_utc(local).utcoffset() == timedelta(0)
    assert as_utc(None) is None
