from __future__ import annotations

from typing import Optional, Protocol

from .model import EmployeeExpenseProfile


class ExpenseProfileRepository(Protocol):
    def get_for_employee(self, employee_id: int) -> Optional[EmployeeExpenseProfile]:
        raise NotImplementedError
