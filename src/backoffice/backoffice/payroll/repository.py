from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..periods.resolver import DateInterval
from .model import PayrollFilters, PayrollRecord


class PayrollRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        labour_card: str,
        labour_card_personal_no: str,
        period: str,
        allowance: float,
        deduction: float,
        mess: float,
        advance: float,
        net: float,
        remark: Optional[str],
        created_by: int,
    ) -> int:
        """Insert a payroll row; raises ConflictError when (employee, period) exists."""

        raise NotImplementedError

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def find_by_key(self, employee_id: int, period: str, *, exclude_id: Optional[int] = None) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def update(self, payroll_id: int, fields: Mapping[str, Any]) -> bool:
        """Apply the given columns; raises ConflictError on a key collision."""

        raise NotImplementedError

    def delete(self, payroll_id: int) -> bool:
        raise NotImplementedError

    def list(
        self,
        filters: PayrollFilters,
        *,
        created: Optional[DateInterval] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[Sequence[PayrollRecord], int]:
        """Matching rows (period desc, created_at desc) and the total match count."""

        raise NotImplementedError
