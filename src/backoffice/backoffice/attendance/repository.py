from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceType
from ..periods.resolver import DateInterval
from .model import AttendanceRecord, UpsertResult


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_by_key(
        self,
        *,
        employee_id: int,
        work_date: date,
        type: AttendanceType,
        project_id: Optional[int] = None,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        employee_id: int,
        work_date: date,
        type: AttendanceType,
        project_id: Optional[int],
        present: bool,
        working_hours: float,
        overtime_hours: float,
        marked_by: int,
    ) -> UpsertResult:
        """Create the record for the key or update it in place, atomically.

        May raise ConflictError when the store cannot do both in one step and
        a concurrent writer won the insert; callers retry once.
        """

        raise NotImplementedError

    def insert(
        self,
        *,
        employee_id: int,
        work_date: date,
        type: AttendanceType,
        project_id: Optional[int],
        present: bool,
        working_hours: float,
        overtime_hours: float,
        marked_by: int,
    ) -> int:
        """Plain insert; raises ConflictError when the key already exists."""

        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        type: Optional[AttendanceType] = None,
        project_id: Optional[int] = None,
        interval: Optional[DateInterval] = None,
        present: Optional[bool] = None,
    ) -> Sequence[AttendanceRecord]:
        """Matching records ordered by work_date, then attendance_id."""

        raise NotImplementedError

    def sum_overtime(
        self,
        *,
        employee_id: int,
        interval: DateInterval,
        type: Optional[AttendanceType] = None,
    ) -> float:
        """Sum of overtime_hours over present marks inside the interval."""

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError
