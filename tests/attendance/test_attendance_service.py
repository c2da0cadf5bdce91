from __future__ import annotations

from datetime import date

import pytest

from src.backoffice.backoffice.attendance.service import AttendanceService
from src.backoffice.backoffice.core.enums import AttendanceType, Role
from src.backoffice.backoffice.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

from ..conftest import ADMIN_ID, DRIVER_ID, OTHER_WORKER_ID, PROJECT_ID, WORKER_ID

DAY = date(2025, 6, 1)


@pytest.fixture
def svc(attendance_repo, employees, projects):
    return AttendanceService(attendance_repo, employees, projects)


def _mark(svc, **overrides):
    kwargs = dict(
        employee_id=WORKER_ID,
        work_date=DAY,
        type="project",
        project_id=PROJECT_ID,
        present=True,
        working_hours=8,
        marked_by=DRIVER_ID,
        current_role=Role.DRIVER,
    )
    kwargs.update(overrides)
    return svc.mark_attendance(**kwargs)


def test_hhmm_hours_derive_overtime(svc):
    rec = _mark(svc, working_hours="12:30")
    assert rec.working_hours == 12.5
    assert rec.overtime_hours == 2.5
    assert rec.type == AttendanceType.PROJECT
    assert rec.project_id == PROJECT_ID


def test_absent_forces_zero_hours(svc):
    rec = _mark(svc, present=False, working_hours=8)
    assert rec.working_hours == 0
    assert rec.overtime_hours == 0


def test_absent_ignores_unparseable_hours(svc):
    rec = _mark(svc, present=False, working_hours="not a time")
    assert rec.working_hours == 0


def test_second_mark_updates_the_single_record(svc, attendance_repo):
    first = _mark(svc, working_hours=9)
    second = _mark(svc, working_hours="11:00")

    assert second.attendance_id == first.attendance_id
    assert len(attendance_repo.all()) == 1
    assert attendance_repo.all()[0].working_hours == 11.0
    assert attendance_repo.all()[0].overtime_hours == 1.0


def test_marking_present_then_absent_clears_overtime(svc, attendance_repo):
    _mark(svc, working_hours=14)
    _mark(svc, present=False, working_hours=14)

    (rec,) = attendance_repo.all()
    assert rec.present is False
    assert rec.overtime_hours == 0


def test_mark_is_idempotent(svc, attendance_repo):
    _mark(svc, working_hours="10:45")
    once = attendance_repo.all()
    _mark(svc, working_hours="10:45")
    assert attendance_repo.all() == once


def test_date_is_normalised_to_the_day(svc):
    rec = _mark(svc, work_date="2025-06-01T17:45:00")
    assert rec.work_date == DAY


def test_normal_and_project_marks_are_separate_keys(svc, attendance_repo):
    _mark(svc)
    _mark(svc, type="normal", project_id=None, marked_by=ADMIN_ID, current_role=Role.ADMIN)
    assert len(attendance_repo.all()) == 2


def test_upsert_conflict_is_retried_once(svc, attendance_repo):
    attendance_repo.conflicts_to_raise = 1
    rec = _mark(svc)
    assert attendance_repo.upsert_calls == 2
    assert rec.attendance_id == attendance_repo.all()[0].attendance_id


def test_invalid_type_rejected(svc):
    with pytest.raises(ValidationError) as exc:
        _mark(svc, type="overtime")
    assert exc.value.field == "type"


def test_project_mark_requires_project_id(svc):
    with pytest.raises(ValidationError):
        _mark(svc, project_id=None)


def test_invalid_hours_rejected(svc):
    with pytest.raises(ValidationError):
        _mark(svc, working_hours="eight")
    with pytest.raises(ValidationError):
        _mark(svc, working_hours=30)


def test_unknown_employee_and_project(svc):
    with pytest.raises(NotFoundError):
        _mark(svc, employee_id=999)
    with pytest.raises(NotFoundError):
        _mark(svc, project_id=999)


def test_unassigned_worker_rejected(svc):
    with pytest.raises(ValidationError):
        _mark(svc, employee_id=OTHER_WORKER_ID)


def test_only_assigned_driver_or_admin_marks_project(svc):
    with pytest.raises(AuthorizationError):
        _mark(svc, marked_by=WORKER_ID, current_role=Role.WORKER)

    rec = _mark(svc, marked_by=ADMIN_ID, current_role=Role.ADMIN)
    assert rec.marked_by == ADMIN_ID


def test_normal_mark_requires_admin(svc):
    with pytest.raises(AuthorizationError):
        _mark(svc, type="normal", project_id=None)


def test_create_attendance_refuses_existing_key(svc):
    _mark(svc)
    with pytest.raises(ConflictError):
        svc.create_attendance(
            employee_id=WORKER_ID,
            work_date=DAY,
            type="project",
            project_id=PROJECT_ID,
            present=True,
            marked_by=ADMIN_ID,
            current_role=Role.ADMIN,
        )


def test_get_attendance_orders_by_date(svc):
    _mark(svc, work_date="2025-06-03")
    _mark(svc, work_date="2025-06-01")
    _mark(svc, work_date="2025-07-01")

    records = svc.get_attendance(WORKER_ID, project_id=PROJECT_ID, year=2025, month=6)
    assert [r.work_date.day for r in records] == [1, 3]


def test_delete_attendance(svc, attendance_repo):
    rec = _mark(svc)
    with pytest.raises(AuthorizationError):
        svc.delete_attendance(rec.attendance_id, current_role=Role.DRIVER)

    svc.delete_attendance(rec.attendance_id, current_role=Role.ADMIN)
    assert attendance_repo.all() == []
    with pytest.raises(NotFoundError):
        svc.delete_attendance(rec.attendance_id, current_role=Role.ADMIN)


def test_monthly_attendance_totals(svc):
    _mark(svc, work_date="2025-06-02", working_hours=12)
    _mark(svc, work_date="2025-06-03", present=False)
    _mark(svc, work_date="2025-06-02", type="normal", project_id=None, working_hours=9, marked_by=ADMIN_ID, current_role=Role.ADMIN)

    result = svc.monthly_attendance(WORKER_ID, year=2025, month=6)
    assert len(result.records) == 3
    assert result.totals["project"].present_days == 1
    assert result.totals["project"].total_overtime_hours == 2.0
    assert result.totals["normal"].total_working_hours == 9.0
    assert result.totals["overall"].present_days == 2

    with pytest.raises(ValidationError):
        svc.monthly_attendance(WORKER_ID, year=None, month=6)
    with pytest.raises(ValidationError):
        svc.monthly_attendance(WORKER_ID, year=2025, month=13)


def test_project_day_roster_defaults_unmarked_to_absent(svc, projects):
    projects.add(PROJECT_ID, "Tower A", driver_id=DRIVER_ID, workers=[WORKER_ID, OTHER_WORKER_ID])
    _mark(svc, working_hours=11)

    roster = svc.project_day_roster(PROJECT_ID, day=DAY)
    by_id = {e.employee_id: e for e in roster}
    assert by_id[WORKER_ID].present is True
    assert by_id[WORKER_ID].overtime_hours == 1.0
    assert by_id[OTHER_WORKER_ID].present is False
    assert by_id[OTHER_WORKER_ID].name == "Omar Other"


def test_daily_normal_attendance_excludes_field_roles(svc):
    svc.mark_attendance(
        employee_id=ADMIN_ID,
        work_date=DAY,
        type="normal",
        present=True,
        working_hours=8,
        marked_by=ADMIN_ID,
        current_role=Role.ADMIN,
    )
    entries = svc.daily_normal_attendance(day="2025-06-01")
    ids = [e.employee_id for e in entries]
    assert WORKER_ID not in ids and DRIVER_ID not in ids
    assert entries[0].employee_id == ADMIN_ID and entries[0].present is True


def test_attendance_summary_grid(svc):
    _mark(svc, work_date="2025-06-01", working_hours=11)
    _mark(svc, work_date="2025-06-02", present=False)

    summary = svc.attendance_summary(project_id=PROJECT_ID, start="2025-06-01", end="2025-06-30")
    assert summary.dates == ["2025-06-01", "2025-06-02"]
    assert summary.rows[1]["marks"][WORKER_ID]["present"] is False
    assert summary.totals[WORKER_ID].present_days == 1
