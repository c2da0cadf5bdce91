from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional

from ..core.constants import HOURS_DECIMALS, OVERTIME_THRESHOLD_HOURS
from ..core.enums import AttendanceType


def compute_overtime(working_hours: float, *, present: bool = True) -> float:
    """Hours beyond the daily threshold; always 0 for an absent mark."""
    if not present:
        return 0.0
    return round(max(0.0, float(working_hours) - OVERTIME_THRESHOLD_HOURS), HOURS_DECIMALS)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance fact per (employee, date, type[, project])."""

    attendance_id: int
    employee_id: int
    work_date: date
    type: AttendanceType
    project_id: Optional[int]
    present: bool
    working_hours: float
    overtime_hours: float
    marked_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple:
        return (self.employee_id, self.work_date, self.type, self.project_id)

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "type": self.type.value,
            "project_id": self.project_id,
            "present": self.present,
            "working_hours": self.working_hours,
            "overtime_hours": self.overtime_hours,
            "marked_by": self.marked_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class UpsertResult:
    attendance_id: int
    created: bool


@dataclass(frozen=True)
class AttendanceTotals:
    present_days: int = 0
    total_working_hours: float = 0.0
    total_overtime_hours: float = 0.0

    @classmethod
    def from_records(cls, records: Iterable[AttendanceRecord]) -> "AttendanceTotals":
        present = 0
        working = 0.0
        overtime = 0.0
        for r in records:
            if r.present:
                present += 1
            working += r.working_hours
            overtime += r.overtime_hours
        return cls(
            present_days=present,
            total_working_hours=round(working, HOURS_DECIMALS),
            total_overtime_hours=round(overtime, HOURS_DECIMALS),
        )

    def to_dict(self) -> dict:
        return {
            "present_days": self.present_days,
            "total_working_hours": self.total_working_hours,
            "total_overtime_hours": self.total_overtime_hours,
        }


@dataclass(frozen=True)
class MonthlyAttendance:
    year: int
    month: int
    type: str
    records: list[AttendanceRecord]
    totals: dict[str, AttendanceTotals]


@dataclass(frozen=True)
class RosterEntry:
    """An employee merged with their mark for one day (absent when unmarked)."""

    employee_id: int
    name: str
    present: bool = False
    working_hours: float = 0.0
    overtime_hours: float = 0.0
    marked_by: Optional[int] = None
    marked_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "present": self.present,
            "working_hours": self.working_hours,
            "overtime_hours": self.overtime_hours,
            "marked_by": self.marked_by,
            "marked_at": self.marked_at.isoformat() if self.marked_at else None,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Date x employee grid of marks with per-employee totals."""

    type: AttendanceType
    project_id: Optional[int]
    dates: list[str]
    employees: list[dict]
    rows: list[dict]
    totals: dict[int, AttendanceTotals] = field(default_factory=dict)
