from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

MONETARY_FIELDS = ("allowance", "deduction", "mess", "advance")


@dataclass(frozen=True)
class PayrollRecord:
    """Stored payroll row: one per (employee, period)."""

    payroll_id: int
    employee_id: int
    labour_card: str
    labour_card_personal_no: str
    period: str
    allowance: float
    deduction: float
    mess: float
    advance: float
    net: float
    remark: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[int, str]:
        return (self.employee_id, self.period)


@dataclass(frozen=True)
class PayrollRow:
    """PayrollRecord enriched at read time with current salary and overtime."""

    record: PayrollRecord
    name: str
    designation: Optional[str]
    emirates_id: Optional[str]
    basic: float
    ot: float
    total_earning: float
    created_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        r = self.record
        return {
            "payroll_id": r.payroll_id,
            "employee_id": r.employee_id,
            "name": self.name,
            "designation": self.designation,
            "emirates_id": self.emirates_id,
            "labour_card": r.labour_card,
            "labour_card_personal_no": r.labour_card_personal_no,
            "period": r.period,
            "basic": self.basic,
            "allowance": r.allowance,
            "ot": self.ot,
            "total_earning": self.total_earning,
            "deduction": r.deduction,
            "mess": r.mess,
            "advance": r.advance,
            "net": r.net,
            "remark": r.remark,
            "created_by": {"id": r.created_by, "name": self.created_by_name} if r.created_by else None,
            "created_at": r.created_at.isoformat() if r.created_at else None,
            "updated_at": r.updated_at.isoformat() if r.updated_at else None,
        }


@dataclass(frozen=True)
class PayrollFilters:
    employee_id: Optional[int] = None
    period: Optional[str] = None
    labour_card: Optional[str] = None
    labour_card_personal_no: Optional[str] = None


@dataclass(frozen=True)
class PayrollPage:
    rows: list[PayrollRow]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict:
        return {
            "current_page": self.page,
            "per_page": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next_page": self.has_next_page,
            "has_previous_page": self.has_previous_page,
        }
