from __future__ import annotations

from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.validators import require_id
from ..core.constants import HOURS_DECIMALS
from ..core.enums import AttendanceType
from ..periods.resolver import parse_period


class OvertimeAggregator:
    """Sums recorded overtime of one employee over a pay period."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def sum_overtime_hours(
        self,
        employee_id: int,
        period: str,
        *,
        type: Optional[AttendanceType] = None,
    ) -> float:
        """Overtime of present marks inside the period, across all types unless `type` is given.

        Raises ValidationError only for a malformed period; an empty period sums to 0.
        """
        interval = parse_period(period)
        total = self._attendance.sum_overtime(
            employee_id=require_id(employee_id, "employee_id"),
            interval=interval,
            type=type,
        )
        return round(float(total or 0.0), HOURS_DECIMALS)
