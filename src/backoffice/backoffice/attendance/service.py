from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Sequence

from ..common.datetime_utils import coerce_date, now_local
from ..common.parsing import parse_bool, parse_hours
from ..common.validators import optional_id, require_id
from ..core.enums import ADMIN_ROLES, FIELD_ROLES, AttendanceType, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..periods.resolver import day_interval, month_interval, parse_month, parse_year, resolve_interval
from ..projects.model import Project
from ..projects.repository import ProjectRepository
from .model import (
    AttendanceRecord,
    AttendanceSummary,
    AttendanceTotals,
    MonthlyAttendance,
    RosterEntry,
    compute_overtime,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def parse_attendance_type(value: Any) -> AttendanceType:
    if isinstance(value, AttendanceType):
        return value
    try:
        return AttendanceType(str(value))
    except ValueError:
        raise ValidationError("Invalid attendance type", field="type")


@dataclass(frozen=True)
class AttendanceMark:
    """Validated, normalized input of a single mark."""

    employee_id: int
    work_date: date
    type: AttendanceType
    project_id: Optional[int]
    present: bool
    working_hours: float
    overtime_hours: float
    marked_by: int


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        projects: ProjectRepository,
    ):
        self._attendance = attendance
        self._employees = employees
        self._projects = projects

    # ---- writes -----------------------------------------------------------

    def _prepare_mark(
        self,
        *,
        employee_id: Any,
        work_date: Any,
        type: Any,
        project_id: Any,
        present: Any,
        working_hours: Any,
        marked_by: int,
        current_role: Role,
    ) -> AttendanceMark:
        att_type = parse_attendance_type(type)
        is_present = parse_bool(present, "present")
        employee_id = require_id(employee_id, "employee_id")
        day = coerce_date(work_date) if work_date not in (None, "") else now_local().date()

        # Absent marks never carry hours, whatever the caller sent.
        hours = parse_hours(working_hours).unwrap("working_hours") if is_present else 0.0

        project: Optional[Project] = None
        if att_type == AttendanceType.PROJECT:
            pid = optional_id(project_id, "project_id")
            if pid is None:
                raise ValidationError("Project ID is required for project attendance", field="project_id")
            project = self._projects.get_by_id(pid)
            if not project:
                raise NotFoundError("Project not found", key=pid)

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found", key=employee_id)

        if project is None:
            self._authorize_normal(current_role)
        else:
            self._authorize_project(project, employee_id=employee_id, marked_by=int(marked_by), current_role=current_role)

        return AttendanceMark(
            employee_id=employee_id,
            work_date=day,
            type=att_type,
            project_id=project.project_id if project else None,
            present=is_present,
            working_hours=hours,
            overtime_hours=compute_overtime(hours, present=is_present),
            marked_by=int(marked_by),
        )

    @staticmethod
    def _authorize_normal(current_role: Role) -> None:
        if current_role not in ADMIN_ROLES:
            raise AuthorizationError("Only administrators can mark normal attendance")

    @staticmethod
    def _authorize_project(project: Project, *, employee_id: int, marked_by: int, current_role: Role) -> None:
        if not project.is_assigned(employee_id):
            raise ValidationError("Employee is not assigned to this project", field="employee_id", key=employee_id)
        if current_role in ADMIN_ROLES:
            return
        if not project.is_driver(marked_by):
            raise AuthorizationError("Only the assigned driver can mark project attendance", key=project.project_id)

    def mark_attendance(
        self,
        *,
        employee_id: Any,
        present: Any,
        marked_by: int,
        current_role: Role,
        type: Any = AttendanceType.PROJECT,
        project_id: Any = None,
        work_date: Any = None,
        working_hours: Any = 0,
    ) -> AttendanceRecord:
        """Record the fact for (employee, date, type[, project]), updating it in place if present."""

        mark = self._prepare_mark(
            employee_id=employee_id,
            work_date=work_date,
            type=type,
            project_id=project_id,
            present=present,
            working_hours=working_hours,
            marked_by=marked_by,
            current_role=current_role,
        )
        fields = dict(
            employee_id=mark.employee_id,
            work_date=mark.work_date,
            type=mark.type,
            project_id=mark.project_id,
            present=mark.present,
            working_hours=mark.working_hours,
            overtime_hours=mark.overtime_hours,
            marked_by=mark.marked_by,
        )

        try:
            result = self._attendance.upsert(**fields)
        except ConflictError:
            # A concurrent writer inserted the same key first; the retry lands as an update.
            logger.warning("attendance upsert conflict for key %s, retrying", (mark.employee_id, mark.work_date, mark.type.value, mark.project_id))
            result = self._attendance.upsert(**fields)

        logger.info(
            "attendance %s: id=%s employee=%s date=%s type=%s present=%s hours=%.2f",
            "created" if result.created else "updated",
            result.attendance_id,
            mark.employee_id,
            mark.work_date,
            mark.type.value,
            mark.present,
            mark.working_hours,
        )
        return self.get_attendance_record(result.attendance_id)

    def create_attendance(
        self,
        *,
        employee_id: Any,
        present: Any,
        marked_by: int,
        current_role: Role,
        type: Any = AttendanceType.NORMAL,
        project_id: Any = None,
        work_date: Any = None,
        working_hours: Any = 0,
    ) -> AttendanceRecord:
        """Administrative back-fill that refuses to touch an existing record."""

        if current_role not in ADMIN_ROLES:
            raise AuthorizationError("Only administrators can back-fill attendance")

        mark = self._prepare_mark(
            employee_id=employee_id,
            work_date=work_date,
            type=type,
            project_id=project_id,
            present=present,
            working_hours=working_hours,
            marked_by=marked_by,
            current_role=current_role,
        )
        key = (mark.employee_id, mark.work_date.isoformat(), mark.type.value, mark.project_id)
        if self._attendance.find_by_key(
            employee_id=mark.employee_id,
            work_date=mark.work_date,
            type=mark.type,
            project_id=mark.project_id,
        ):
            raise ConflictError("Attendance already recorded for this employee and date", key=key)

        attendance_id = self._attendance.insert(
            employee_id=mark.employee_id,
            work_date=mark.work_date,
            type=mark.type,
            project_id=mark.project_id,
            present=mark.present,
            working_hours=mark.working_hours,
            overtime_hours=mark.overtime_hours,
            marked_by=mark.marked_by,
        )
        logger.info("attendance created: id=%s key=%s", attendance_id, key)
        return self.get_attendance_record(attendance_id)

    def delete_attendance(self, attendance_id: Any, *, current_role: Role) -> None:
        if current_role not in ADMIN_ROLES:
            raise AuthorizationError("Only administrators can delete attendance")

        attendance_id = require_id(attendance_id, "attendance_id")
        if not self._attendance.delete(attendance_id):
            raise NotFoundError("Attendance record not found", key=attendance_id)
        logger.info("attendance deleted: id=%s", attendance_id)

    # ---- reads ------------------------------------------------------------

    def get_attendance_record(self, attendance_id: Any) -> AttendanceRecord:
        attendance_id = require_id(attendance_id, "attendance_id")
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found", key=attendance_id)
        return record

    def get_attendance(
        self,
        employee_id: Any,
        *,
        type: Any = AttendanceType.PROJECT,
        project_id: Any = None,
        start: Any = None,
        end: Any = None,
        year: Any = None,
        month: Any = None,
    ) -> Sequence[AttendanceRecord]:
        att_type = parse_attendance_type(type)
        pid = optional_id(project_id, "project_id") if att_type == AttendanceType.PROJECT else None
        interval = resolve_interval(start=start, end=end, year=year, month=month)
        return self._attendance.list_records(
            employee_id=require_id(employee_id, "employee_id"),
            type=att_type,
            project_id=pid,
            interval=interval,
        )

    def monthly_attendance(self, employee_id: Any, *, year: Any, month: Any, type: Any = "all") -> MonthlyAttendance:
        if year in (None, "") or month in (None, ""):
            raise ValidationError("Month and year are required", field="month" if month in (None, "") else "year")

        employee_id = require_id(employee_id, "employee_id")
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found", key=employee_id)

        interval = month_interval(parse_year(year), parse_month(month))
        att_type = None if type in (None, "", "all") else parse_attendance_type(type)

        records = list(self._attendance.list_records(employee_id=employee_id, type=att_type, interval=interval))
        totals = {"overall": AttendanceTotals.from_records(records)}
        if att_type is None:
            for t in AttendanceType:
                totals[t.value] = AttendanceTotals.from_records(r for r in records if r.type == t)

        return MonthlyAttendance(
            year=interval.start.year,
            month=interval.start.month,
            type=att_type.value if att_type else "all",
            records=records,
            totals=totals,
        )

    def project_day_roster(self, project_id: Any, *, day: Any = None) -> list[RosterEntry]:
        """Assigned workers of a project merged with that day's project marks."""

        project_id = require_id(project_id, "project_id")
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found", key=project_id)

        interval = day_interval(day if day not in (None, "") else now_local().date())
        marks = {
            r.employee_id: r
            for r in self._attendance.list_records(type=AttendanceType.PROJECT, project_id=project_id, interval=interval)
        }
        workers = self._employees.get_many(project.assigned_worker_ids)
        return [self._roster_entry(workers.get(wid), wid, marks.get(wid)) for wid in sorted(project.assigned_worker_ids)]

    def daily_normal_attendance(self, *, day: Any) -> list[RosterEntry]:
        """Office staff (everyone but drivers and workers) merged with the day's normal marks."""

        if day in (None, ""):
            raise ValidationError("Date is required", field="date")
        interval = day_interval(day)
        marks = {
            r.employee_id: r
            for r in self._attendance.list_records(type=AttendanceType.NORMAL, interval=interval)
        }
        staff = self._employees.list_excluding_roles(FIELD_ROLES)
        return [self._roster_entry(e, e.employee_id, marks.get(e.employee_id)) for e in staff]

    @staticmethod
    def _roster_entry(employee, employee_id: int, mark: Optional[AttendanceRecord]) -> RosterEntry:
        name = employee.full_name if employee else "Unknown"
        if not mark:
            return RosterEntry(employee_id=employee_id, name=name)
        return RosterEntry(
            employee_id=employee_id,
            name=name,
            present=mark.present,
            working_hours=mark.working_hours,
            overtime_hours=mark.overtime_hours,
            marked_by=mark.marked_by,
            marked_at=mark.created_at,
        )

    def attendance_summary(
        self,
        *,
        type: Any = AttendanceType.PROJECT,
        project_id: Any = None,
        start: Any = None,
        end: Any = None,
    ) -> AttendanceSummary:
        att_type = parse_attendance_type(type)
        pid = None
        if att_type == AttendanceType.PROJECT:
            pid = optional_id(project_id, "project_id")
            if pid is None:
                raise ValidationError("Project ID is required for project attendance summary", field="project_id")

        interval = resolve_interval(start=start, end=end)
        records = self._attendance.list_records(type=att_type, project_id=pid, interval=interval)

        dates = sorted({r.work_date.isoformat() for r in records})
        employee_ids: list[int] = []
        for r in records:
            if r.employee_id not in employee_ids:
                employee_ids.append(r.employee_id)
        names = self._employees.get_many(employee_ids)

        cells = {(r.work_date.isoformat(), r.employee_id): r for r in records}
        rows = []
        for d in dates:
            marks = {}
            for eid in employee_ids:
                rec = cells.get((d, eid))
                marks[eid] = (
                    {
                        "present": rec.present,
                        "working_hours": rec.working_hours,
                        "overtime_hours": rec.overtime_hours,
                    }
                    if rec
                    else None
                )
            rows.append({"date": d, "marks": marks})

        totals = {
            eid: AttendanceTotals.from_records(r for r in records if r.employee_id == eid)
            for eid in employee_ids
        }
        return AttendanceSummary(
            type=att_type,
            project_id=pid,
            dates=dates,
            employees=[
                {"employee_id": eid, "name": names[eid].full_name if eid in names else "Unknown"}
                for eid in employee_ids
            ],
            rows=rows,
            totals=totals,
        )
