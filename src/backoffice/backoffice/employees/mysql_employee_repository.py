from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "user_id, first_name, last_name, role, emirates_id"


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["user_id"]),
        first_name=row["first_name"],
        last_name=row.get("last_name") or "",
        role=Role(row["role"]),
        emirates_id=row.get("emirates_id"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_many(self, employee_ids: Iterable[int]) -> Mapping[int, Employee]:
        ids = sorted({int(i) for i in employee_ids})
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id IN ({placeholders})", tuple(ids))
            return {e.employee_id: e for e in map(_to_employee, fetchall(cur))}

    def list_excluding_roles(self, roles: Iterable[Role]) -> Sequence[Employee]:
        excluded = [r.value for r in roles]
        with db_cursor(self._conn_factory) as (_, cur):
            if excluded:
                placeholders = ",".join(["%s"] * len(excluded))
                cur.execute(
                    f"SELECT {_COLUMNS} FROM users WHERE role NOT IN ({placeholders}) ORDER BY user_id ASC",
                    tuple(excluded),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id ASC")
            return [_to_employee(r) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM users")
            row = fetchone(cur)
            return int(row["total"]) if row else 0
