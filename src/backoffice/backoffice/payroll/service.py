from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..common.parsing import parse_amount
from ..common.validators import optional_id, require_id, require_non_empty
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from ..core.enums import PAYROLL_WRITER_ROLES, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..expenses.repository import ExpenseProfileRepository
from ..overtime.aggregator import OvertimeAggregator
from ..periods.resolver import normalize_period, resolve_interval
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import MONETARY_FIELDS, PayrollFilters, PayrollPage, PayrollRecord, PayrollRow
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGE = "Payroll record already exists for this employee and period"


def _positive_int(value: Any, default: int, field_name: str) -> int:
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive integer", field=field_name)
    if number < 1:
        raise ValidationError(f"{field_name} must be a positive integer", field=field_name)
    return number


class PayrollService:
    def __init__(
        self,
        payrolls: PayrollRepository,
        employees: EmployeeRepository,
        expenses: ExpenseProfileRepository,
        overtime: OvertimeAggregator,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payrolls = payrolls
        self._employees = employees
        self._expenses = expenses
        self._overtime = overtime
        self._calculator = calculator or StandardPayrollCalculator()

    @staticmethod
    def _require_writer(current_role: Role) -> None:
        if current_role not in PAYROLL_WRITER_ROLES:
            raise AuthorizationError("Not allowed to modify payroll records")

    def _basic_salary(self, employee_id: int) -> float:
        profile = self._expenses.get_for_employee(employee_id)
        return profile.basic_salary if profile else 0.0

    def _compute_net(self, employee_id: int, period: str, amounts: Mapping[str, float]) -> float:
        return self._calculator.net(
            basic_salary=self._basic_salary(employee_id),
            allowance=amounts["allowance"],
            overtime=self._overtime.sum_overtime_hours(employee_id, period),
            deduction=amounts["deduction"],
            mess=amounts["mess"],
            advance=amounts["advance"],
        )

    # ---- writes -----------------------------------------------------------

    def create_payroll(
        self,
        *,
        employee_id: Any,
        period: Any,
        labour_card: Any,
        labour_card_personal_no: Any,
        allowance: Any,
        deduction: Any,
        mess: Any,
        advance: Any,
        created_by: int,
        current_role: Role,
        remark: Optional[str] = None,
    ) -> PayrollRow:
        self._require_writer(current_role)

        employee_id = require_id(employee_id, "employee_id")
        period = normalize_period(require_non_empty(period, "period"))
        labour_card = require_non_empty(labour_card, "labour_card")
        labour_card_personal_no = require_non_empty(labour_card_personal_no, "labour_card_personal_no")
        raw = {"allowance": allowance, "deduction": deduction, "mess": mess, "advance": advance}
        amounts = {}
        for name, value in raw.items():
            if value is None:
                raise ValidationError(f"{name} is required", field=name)
            amounts[name] = parse_amount(value).unwrap(name)

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found", key=employee_id)
        if self._payrolls.find_by_key(employee_id, period):
            raise ConflictError(_DUPLICATE_MESSAGE, key=(employee_id, period))

        net = self._compute_net(employee_id, period, amounts)
        payroll_id = self._payrolls.create(
            employee_id=employee_id,
            labour_card=labour_card,
            labour_card_personal_no=labour_card_personal_no,
            period=period,
            net=net,
            remark=remark,
            created_by=int(created_by),
            **amounts,
        )
        logger.info("payroll created: id=%s employee=%s period=%s net=%.2f", payroll_id, employee_id, period, net)
        return self.get_payroll(payroll_id)

    def update_payroll(self, payroll_id: Any, changes: Mapping[str, Any], *, current_role: Role) -> PayrollRow:
        """Apply a partial update; net is re-derived from current inputs, never patched."""

        self._require_writer(current_role)
        payroll_id = require_id(payroll_id, "payroll_id")
        existing = self._payrolls.get_by_id(payroll_id)
        if not existing:
            raise NotFoundError("Payroll not found", key=payroll_id)

        fields: dict[str, Any] = {}
        for name in ("labour_card", "labour_card_personal_no"):
            if changes.get(name) not in (None, ""):
                fields[name] = str(changes[name]).strip()
        if "remark" in changes:
            fields["remark"] = changes["remark"]

        employee_id = existing.employee_id
        if changes.get("employee_id") not in (None, ""):
            employee_id = require_id(changes["employee_id"], "employee_id")
            if not self._employees.get_by_id(employee_id):
                raise NotFoundError("Employee not found", key=employee_id)
            fields["employee_id"] = employee_id
        period = existing.period
        if changes.get("period") not in (None, ""):
            period = normalize_period(changes["period"])
            fields["period"] = period

        key_changed = (employee_id, period) != existing.key
        if key_changed and self._payrolls.find_by_key(employee_id, period, exclude_id=payroll_id):
            raise ConflictError(_DUPLICATE_MESSAGE, key=(employee_id, period))

        amounts = {name: getattr(existing, name) for name in MONETARY_FIELDS}
        money_changed = False
        for name in MONETARY_FIELDS:
            if name not in changes:
                continue
            parsed = parse_amount(changes[name])
            if not parsed.ok:
                logger.warning(
                    "payroll %s: %s=%r coerced to 0 (%s)", payroll_id, name, changes[name], parsed.error
                )
            amounts[name] = parsed.or_default(0.0)
            fields[name] = amounts[name]
            money_changed = True

        if money_changed or key_changed:
            fields["net"] = self._compute_net(employee_id, period, amounts)

        if not self._payrolls.update(payroll_id, fields):
            raise NotFoundError("Payroll not found", key=payroll_id)
        logger.info("payroll updated: id=%s fields=%s", payroll_id, sorted(fields))
        return self.get_payroll(payroll_id)

    def delete_payroll(self, payroll_id: Any, *, current_role: Role) -> None:
        self._require_writer(current_role)
        payroll_id = require_id(payroll_id, "payroll_id")
        if not self._payrolls.delete(payroll_id):
            raise NotFoundError("Payroll not found", key=payroll_id)
        logger.info("payroll deleted: id=%s", payroll_id)

    # ---- reads ------------------------------------------------------------

    def _enrich(self, record: PayrollRecord) -> PayrollRow:
        people = self._employees.get_many([i for i in (record.employee_id, record.created_by) if i])
        employee = people.get(record.employee_id)
        if not employee:
            logger.warning("payroll %s references missing employee %s", record.payroll_id, record.employee_id)
        creator = people.get(record.created_by) if record.created_by else None

        basic = self._basic_salary(record.employee_id)
        ot = self._overtime.sum_overtime_hours(record.employee_id, record.period)
        return PayrollRow(
            record=record,
            name=employee.full_name if employee else "N/A",
            designation=employee.role.value if employee else None,
            emirates_id=(employee.emirates_id if employee else None) or "N/A",
            basic=basic,
            ot=ot,
            total_earning=self._calculator.total_earning(basic_salary=basic, allowance=record.allowance, overtime=ot),
            created_by_name=creator.full_name if creator else "System",
        )

    def get_payroll(self, payroll_id: Any) -> PayrollRow:
        payroll_id = require_id(payroll_id, "payroll_id")
        record = self._payrolls.get_by_id(payroll_id)
        if not record:
            raise NotFoundError("Payroll not found", key=payroll_id)
        return self._enrich(record)

    @staticmethod
    def build_filters(
        *,
        employee_id: Any = None,
        period: Any = None,
        labour_card: Any = None,
        labour_card_personal_no: Any = None,
    ) -> PayrollFilters:
        return PayrollFilters(
            employee_id=optional_id(employee_id, "employee_id"),
            period=normalize_period(period) if period not in (None, "") else None,
            labour_card=labour_card or None,
            labour_card_personal_no=labour_card_personal_no or None,
        )

    def list_payrolls(
        self,
        filters: PayrollFilters,
        *,
        start: Any = None,
        end: Any = None,
        year: Any = None,
        month: Any = None,
        page: Any = DEFAULT_PAGE,
        limit: Any = DEFAULT_PAGE_LIMIT,
    ) -> PayrollPage:
        """Filter on creation time (not pay period) for start/end and year/month."""

        page = _positive_int(page, DEFAULT_PAGE, "page")
        limit = _positive_int(limit, DEFAULT_PAGE_LIMIT, "limit")
        created = resolve_interval(start=start, end=end, year=year, month=month)

        records, total = self._payrolls.list(filters, created=created, limit=limit, offset=(page - 1) * limit)
        return PayrollPage(rows=[self._enrich(r) for r in records], total=total, page=page, limit=limit)

    def export_rows(
        self,
        filters: PayrollFilters,
        *,
        start: Any = None,
        end: Any = None,
        year: Any = None,
        month: Any = None,
    ) -> list[dict]:
        """Every matching row flattened for a spreadsheet, numbered from 1."""

        created = resolve_interval(start=start, end=end, year=year, month=month)
        records, _ = self._payrolls.list(filters, created=created)
        out = []
        for index, record in enumerate(records, start=1):
            row = self._enrich(record)
            out.append(
                {
                    "S/NO": index,
                    "NAME": row.name,
                    "Designation": row.designation or "N/A",
                    "EMIRATES ID": row.emirates_id,
                    "LABOUR CARD": record.labour_card,
                    "LABOUR CARD PERSONAL NO": record.labour_card_personal_no,
                    "PERIOD": record.period,
                    "BASIC": row.basic,
                    "ALLOWANCE": record.allowance,
                    "OT": row.ot,
                    "TOTAL EARNING": row.total_earning,
                    "DEDUCTION": record.deduction,
                    "MESS": record.mess,
                    "ADVANCE": record.advance,
                    "NET": record.net,
                    "REMARK": record.remark or "",
                }
            )
        return out
