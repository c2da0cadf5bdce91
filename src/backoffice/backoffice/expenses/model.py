from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EmployeeExpenseProfile:
    """Static salary figures of an employee; payroll reads basic_salary only."""

    employee_id: int
    basic_salary: float
    allowance: float = 0.0
