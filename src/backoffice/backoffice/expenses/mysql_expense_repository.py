from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchone
from .model import EmployeeExpenseProfile
from .repository import ExpenseProfileRepository


class MySQLExpenseProfileRepository(ExpenseProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee(self, employee_id: int) -> Optional[EmployeeExpenseProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, basic_salary, allowance
                FROM employee_expenses
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return EmployeeExpenseProfile(
                employee_id=int(r["employee_id"]),
                basic_salary=as_float(r["basic_salary"]),
                allowance=as_float(r.get("allowance")),
            )
