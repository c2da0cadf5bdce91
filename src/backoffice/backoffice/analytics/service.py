from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_id
from ..core.constants import DEFAULT_TREND_MONTHS, PERFORMERS_LIMIT
from ..core.enums import AttendanceType, Granularity
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..periods.resolver import parse_year, trailing_months, year_interval
from ..projects.repository import ProjectRepository


def attendance_rate(present: int, total: int) -> float:
    """present / total as a fraction; 0 when there is nothing to rate."""
    if not total:
        return 0.0
    return present / total


def rate_percent(present: int, total: int) -> float:
    return round(attendance_rate(present, total) * 100, 1)


@dataclass
class _Tally:
    present: int = 0
    total: int = 0

    def add(self, record: AttendanceRecord) -> None:
        self.total += 1
        if record.present:
            self.present += 1

    @property
    def absent(self) -> int:
        return self.total - self.present


def _tally(records: Iterable[AttendanceRecord]) -> _Tally:
    t = _Tally()
    for r in records:
        t.add(r)
    return t


def _period_label(day: date, granularity: Granularity) -> str:
    if granularity == Granularity.WEEKLY:
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    return day.strftime("%Y-%m")


def parse_granularity(value: Any) -> Granularity:
    if isinstance(value, Granularity):
        return value
    if value in (None, ""):
        return Granularity.MONTHLY
    try:
        return Granularity(str(value))
    except ValueError:
        raise ValidationError("Invalid period, expected monthly or weekly", field="period")


class AttendanceAnalyticsService:
    """Read-only dashboard views derived from the attendance ledger."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        projects: ProjectRepository,
    ):
        self._attendance = attendance
        self._employees = employees
        self._projects = projects

    def overview_stats(self, *, year: Any = None, today: Optional[date] = None) -> dict:
        today = today or now_local().date()
        interval = year_interval(parse_year(year) if year not in (None, "") else today.year)
        records = self._attendance.list_records(interval=interval)

        overall = _tally(records)

        by_month: dict[int, _Tally] = {}
        by_employee: dict[int, _Tally] = {}
        for r in records:
            by_month.setdefault(r.work_date.month, _Tally()).add(r)
            # first-seen order keeps the ranking stable for ties
            by_employee.setdefault(r.employee_id, _Tally()).add(r)

        names = self._employees.get_many(by_employee.keys())
        # rank on the exact fraction; rounding only applies to the payload
        order = sorted(by_employee.items(), key=lambda item: attendance_rate(item[1].present, item[1].total), reverse=True)
        ranked = [
            {
                "employee_id": eid,
                "name": names[eid].full_name if eid in names else "Unknown",
                "present": t.present,
                "total": t.total,
                "attendance_rate": rate_percent(t.present, t.total),
            }
            for eid, t in order
        ]

        return {
            "year": interval.start.year,
            "total_employees": self._employees.count(),
            "total_present": overall.present,
            "total_absent": overall.absent,
            "overall_attendance": rate_percent(overall.present, overall.total),
            "monthly_trend": [
                {"month": m, "attendance_rate": rate_percent(t.present, t.total)}
                for m, t in sorted(by_month.items())
            ],
            "top_performers": ranked[:PERFORMERS_LIMIT],
            "bottom_performers": ranked[-PERFORMERS_LIMIT:][::-1],
        }

    def employee_trend(
        self,
        employee_id: Any,
        *,
        months: Any = DEFAULT_TREND_MONTHS,
        today: Optional[date] = None,
    ) -> dict:
        employee_id = require_id(employee_id, "employee_id")
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found", key=employee_id)

        try:
            window = int(months) if months not in (None, "") else DEFAULT_TREND_MONTHS
        except (TypeError, ValueError):
            raise ValidationError("months must be a positive number", field="months")
        interval = trailing_months(window, today=today or now_local().date())

        by_month: dict[str, _Tally] = {}
        for r in self._attendance.list_records(employee_id=employee_id, interval=interval):
            by_month.setdefault(r.work_date.strftime("%Y-%m"), _Tally()).add(r)

        trend = [
            {
                "month": label,
                "attendance_rate": rate_percent(t.present, t.total),
                "present_days": t.present,
                "working_days": t.total,
            }
            for label, t in sorted(by_month.items())
        ]
        present = sum(t.present for t in by_month.values())
        total = sum(t.total for t in by_month.values())
        return {
            "employee": {"id": employee.employee_id, "name": employee.full_name, "position": employee.role.value},
            "months": window,
            "trend_data": trend,
            "overall_attendance": rate_percent(present, total),
            "total_present": present,
            "total_absent": total - present,
        }

    def all_projects_stats(self) -> list[dict]:
        stats = []
        for project in self._projects.list_all():
            t = _tally(self._attendance.list_records(type=AttendanceType.PROJECT, project_id=project.project_id))
            stats.append(
                {
                    "project_id": project.project_id,
                    "project_name": project.project_name,
                    "present": t.present,
                    "total": t.total,
                    "attendance_rate": rate_percent(t.present, t.total),
                }
            )
        stats.sort(key=lambda s: attendance_rate(s["present"], s["total"]), reverse=True)
        return stats

    def project_analytics(self, project_id: Any, *, granularity: Any = Granularity.MONTHLY) -> dict:
        project_id = require_id(project_id, "project_id")
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found", key=project_id)
        granularity = parse_granularity(granularity)

        records = self._attendance.list_records(type=AttendanceType.PROJECT, project_id=project_id)
        buckets: dict[str, dict[int, _Tally]] = {}
        for r in records:
            label = _period_label(r.work_date, granularity)
            buckets.setdefault(label, {}).setdefault(r.employee_id, _Tally()).add(r)

        names = self._employees.get_many({r.employee_id for r in records})
        analytics = []
        for label in sorted(buckets):
            workers = buckets[label]
            present = sum(t.present for t in workers.values())
            total = sum(t.total for t in workers.values())
            analytics.append(
                {
                    "period": label,
                    "attendance_rate": rate_percent(present, total),
                    "workers": [
                        {
                            "employee_id": eid,
                            "name": names[eid].full_name if eid in names else "Unknown",
                            "present_days": t.present,
                            "total_days": t.total,
                            "attendance_rate": rate_percent(t.present, t.total),
                        }
                        for eid, t in workers.items()
                    ],
                }
            )

        return {
            "project": {"id": project.project_id, "name": project.project_name},
            "period": granularity.value,
            "analytics": analytics,
        }
