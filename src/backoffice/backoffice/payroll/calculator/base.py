from __future__ import annotations

from abc import ABC, abstractmethod


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def total_earning(self, *, basic_salary: float, allowance: float, overtime: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def net(
        self,
        *,
        basic_salary: float,
        allowance: float,
        overtime: float,
        deduction: float,
        mess: float,
        advance: float,
    ) -> float:
        raise NotImplementedError
