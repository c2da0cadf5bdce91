from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.backoffice.backoffice.analytics.service import AttendanceAnalyticsService, attendance_rate, parse_granularity
from src.backoffice.backoffice.core.enums import AttendanceType, Granularity
from src.backoffice.backoffice.core.exceptions import NotFoundError, ValidationError

from ..conftest import ADMIN_ID, DRIVER_ID, OTHER_WORKER_ID, PROJECT_ID, WORKER_ID


def _add(repo, employee_id, day, present, *, type=AttendanceType.PROJECT, project_id=PROJECT_ID):
    repo.insert(
        employee_id=employee_id,
        work_date=day,
        type=type,
        project_id=project_id if type == AttendanceType.PROJECT else None,
        present=present,
        working_hours=8 if present else 0,
        overtime_hours=0,
        marked_by=DRIVER_ID,
    )


@pytest.fixture
def svc(attendance_repo, employees, projects):
    return AttendanceAnalyticsService(attendance_repo, employees, projects)


def test_rate_handles_zero_total():
    assert attendance_rate(0, 0) == 0
    assert attendance_rate(3, 4) == 0.75


def test_overview_counts_trend_and_performers(svc, attendance_repo):
    _add(attendance_repo, WORKER_ID, date(2025, 1, 5), True)
    _add(attendance_repo, WORKER_ID, date(2025, 1, 6), True)
    _add(attendance_repo, WORKER_ID, date(2025, 2, 1), False)
    _add(attendance_repo, ADMIN_ID, date(2025, 2, 1), True, type=AttendanceType.NORMAL)
    _add(attendance_repo, OTHER_WORKER_ID, date(2025, 2, 2), False)
    _add(attendance_repo, WORKER_ID, date(2024, 12, 31), False)

    stats = svc.overview_stats(year=2025)
    assert stats["total_present"] == 3
    assert stats["total_absent"] == 2
    assert stats["overall_attendance"] == 60.0
    assert stats["total_employees"] == 5
    assert stats["monthly_trend"] == [
        {"month": 1, "attendance_rate": 100.0},
        {"month": 2, "attendance_rate": 33.3},
    ]
    assert [p["employee_id"] for p in stats["top_performers"]] == [ADMIN_ID, WORKER_ID, OTHER_WORKER_ID]
    assert [p["employee_id"] for p in stats["bottom_performers"]] == [OTHER_WORKER_ID, WORKER_ID, ADMIN_ID]


def test_overview_for_empty_year_has_zero_rate(svc):
    stats = svc.overview_stats(year=2030)
    assert stats["overall_attendance"] == 0
    assert stats["top_performers"] == []


def test_employee_trend_over_trailing_window(svc, attendance_repo):
    _add(attendance_repo, WORKER_ID, date(2025, 1, 10), True)
    _add(attendance_repo, WORKER_ID, date(2025, 5, 10), True)
    _add(attendance_repo, WORKER_ID, date(2025, 5, 11), False)
    _add(attendance_repo, WORKER_ID, date(2025, 6, 1), True)

    trend = svc.employee_trend(WORKER_ID, months=3, today=date(2025, 6, 15))
    assert [m["month"] for m in trend["trend_data"]] == ["2025-05", "2025-06"]
    assert trend["trend_data"][0]["attendance_rate"] == 50.0
    assert trend["total_present"] == 2
    assert trend["total_absent"] == 1
    assert trend["overall_attendance"] == 66.7

    with pytest.raises(NotFoundError):
        svc.employee_trend(999)


def test_all_projects_sorted_by_rate(svc, projects, attendance_repo):
    projects.add(20, "Villa B", workers=[OTHER_WORKER_ID])
    projects.add(30, "Empty site")
    _add(attendance_repo, WORKER_ID, date(2025, 3, 1), True)
    _add(attendance_repo, WORKER_ID, date(2025, 3, 2), False)
    _add(attendance_repo, OTHER_WORKER_ID, date(2025, 3, 1), True, project_id=20)

    stats = svc.all_projects_stats()
    assert [s["project_id"] for s in stats] == [20, PROJECT_ID, 30]
    assert stats[1]["attendance_rate"] == 50.0
    assert stats[2]["total"] == 0 and stats[2]["attendance_rate"] == 0


def test_project_analytics_monthly_and_weekly(svc, attendance_repo):
    _add(attendance_repo, WORKER_ID, date(2025, 3, 3), True)
    _add(attendance_repo, WORKER_ID, date(2025, 3, 4), False)
    _add(attendance_repo, WORKER_ID, date(2025, 3, 10), True)

    monthly = svc.project_analytics(PROJECT_ID)
    assert [a["period"] for a in monthly["analytics"]] == ["2025-03"]
    assert monthly["analytics"][0]["attendance_rate"] == 66.7
    assert monthly["analytics"][0]["workers"][0]["total_days"] == 3

    weekly = svc.project_analytics(PROJECT_ID, granularity="weekly")
    assert [a["period"] for a in weekly["analytics"]] == ["2025-W10", "2025-W11"]

    with pytest.raises(ValidationError):
        svc.project_analytics(PROJECT_ID, granularity="daily")
    with pytest.raises(NotFoundError):
        svc.project_analytics(999)


def test_ranking_uses_exact_rate_not_rounded_percent(svc, attendance_repo):
    # 1/39 and 1/38 both round to 2.6%; the higher exact rate still ranks first
    start = date(2025, 1, 1)
    for i in range(39):
        _add(attendance_repo, WORKER_ID, start + timedelta(days=i), i == 0)
    for i in range(38):
        _add(attendance_repo, OTHER_WORKER_ID, start + timedelta(days=100 + i), i == 0)

    stats = svc.overview_stats(year=2025)
    top = stats["top_performers"]
    assert [p["employee_id"] for p in top] == [OTHER_WORKER_ID, WORKER_ID]
    assert top[0]["attendance_rate"] == top[1]["attendance_rate"] == 2.6


def test_granularity_accepts_enum_members():
    assert parse_granularity(Granularity.WEEKLY) is Granularity.WEEKLY
    assert parse_granularity(Granularity.MONTHLY) is Granularity.MONTHLY
    assert parse_granularity(None) is Granularity.MONTHLY
    assert parse_granularity("weekly") is Granularity.WEEKLY


def test_project_analytics_with_enum_granularity(svc, attendance_repo):
    _add(attendance_repo, WORKER_ID, date(2025, 3, 3), True)

    weekly = svc.project_analytics(PROJECT_ID, granularity=Granularity.WEEKLY)
    assert [a["period"] for a in weekly["analytics"]] == ["2025-W10"]
    monthly = svc.project_analytics(PROJECT_ID, granularity=Granularity.MONTHLY)
    assert [a["period"] for a in monthly["analytics"]] == ["2025-03"]


def test_employee_trend_rejects_oversized_window(svc):
    with pytest.raises(ValidationError):
        svc.employee_trend(WORKER_ID, months=100000, today=date(2025, 6, 15))


@pytest.mark.parametrize("year", ["abc", 1999, "2101"])
def test_overview_rejects_bad_year(svc, year):
    with pytest.raises(ValidationError):
        svc.overview_stats(year=year)
