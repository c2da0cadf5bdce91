from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_body, login_required, ok, roles_required
from ..core.enums import ADMIN_ROLES, AttendanceType
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @login_required
    def mark():
        caller = current_caller()
        data = json_body()
        record = service.mark_attendance(
            employee_id=data.get("employee_id"),
            work_date=data.get("date"),
            type=data.get("type", AttendanceType.PROJECT.value),
            project_id=data.get("project_id"),
            present=data.get("present"),
            working_hours=data.get("working_hours", 0),
            marked_by=caller.user_id,
            current_role=caller.role,
        )
        return ok(record.to_dict(), "Attendance marked successfully")

    @app.route("/api/attendance/<int:employee_id>", methods=["GET"], endpoint="attendance_list")
    @login_required
    def list_for_employee(employee_id: int):
        args = request.args
        records = service.get_attendance(
            employee_id,
            type=args.get("type", AttendanceType.PROJECT.value),
            project_id=args.get("project_id"),
            start=args.get("start_date"),
            end=args.get("end_date"),
            year=args.get("year"),
            month=args.get("month"),
        )
        return ok([r.to_dict() for r in records], "Attendance retrieved successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @roles_required(ADMIN_ROLES)
    def delete(attendance_id: int):
        service.delete_attendance(attendance_id, current_role=current_caller().role)
        return ok(None, "Attendance deleted successfully")

    @app.route("/api/attendance/<int:employee_id>/monthly", methods=["GET"], endpoint="attendance_monthly")
    @login_required
    def monthly(employee_id: int):
        args = request.args
        result = service.monthly_attendance(
            employee_id,
            year=args.get("year"),
            month=args.get("month"),
            type=args.get("type", "all"),
        )
        return ok(
            {
                "year": result.year,
                "month": result.month,
                "type": result.type,
                "records": [r.to_dict() for r in result.records],
                "totals": {name: t.to_dict() for name, t in result.totals.items()},
            },
            "Monthly attendance retrieved successfully",
        )

    @app.route("/api/attendance/project/<int:project_id>/roster", methods=["GET"], endpoint="attendance_roster")
    @login_required
    def roster(project_id: int):
        entries = service.project_day_roster(project_id, day=request.args.get("date"))
        return ok([e.to_dict() for e in entries], "Project attendance retrieved successfully")

    @app.route("/api/attendance/normal/daily", methods=["GET"], endpoint="attendance_normal_daily")
    @roles_required(ADMIN_ROLES)
    def normal_daily():
        entries = service.daily_normal_attendance(day=request.args.get("date"))
        return ok([e.to_dict() for e in entries], "Daily attendance retrieved successfully")

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def summary():
        args = request.args
        result = service.attendance_summary(
            type=args.get("type", AttendanceType.PROJECT.value),
            project_id=args.get("project_id"),
            start=args.get("start_date"),
            end=args.get("end_date"),
        )
        return ok(
            {
                "type": result.type.value,
                "project_id": result.project_id,
                "dates": result.dates,
                "employees": result.employees,
                "rows": [
                    {"date": row["date"], "marks": {str(eid): m for eid, m in row["marks"].items()}}
                    for row in result.rows
                ],
                "totals": {str(eid): t.to_dict() for eid, t in result.totals.items()},
            },
            "Attendance summary retrieved successfully",
        )
