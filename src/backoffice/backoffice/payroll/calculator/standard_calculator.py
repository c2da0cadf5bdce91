from __future__ import annotations

from .base import PayrollCalculator


def _money(value: float) -> float:
    return round(float(value), 2)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: basic + allowance + overtime - deduction - mess - advance.

    Net is not clamped; deductions larger than earnings give a negative net.
    """

    def total_earning(self, *, basic_salary: float, allowance: float, overtime: float) -> float:
        return _money(float(basic_salary or 0) + float(allowance or 0) + float(overtime or 0))

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
        earning = self.total_earning(basic_salary=basic_salary, allowance=allowance, overtime=overtime)
        return _money(earning - float(deduction or 0) - float(mess or 0) - float(advance or 0))
