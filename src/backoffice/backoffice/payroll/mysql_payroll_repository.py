from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, conflict_on_duplicate, db_cursor, fetchall, fetchone
from ..periods.resolver import DateInterval
from .model import PayrollFilters, PayrollRecord
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, employee_id, labour_card, labour_card_personal_no, period,
    allowance, deduction, mess, advance, net, remark, created_by, created_at, updated_at
"""

_UPDATABLE = frozenset(
    {
        "employee_id",
        "labour_card",
        "labour_card_personal_no",
        "period",
        "allowance",
        "deduction",
        "mess",
        "advance",
        "net",
        "remark",
    }
)

_DUPLICATE_MESSAGE = "Payroll record already exists for this employee and period"


def _to_record(r: dict) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        labour_card=r["labour_card"],
        labour_card_personal_no=r["labour_card_personal_no"],
        period=r["period"],
        allowance=as_float(r["allowance"]),
        deduction=as_float(r["deduction"]),
        mess=as_float(r["mess"]),
        advance=as_float(r["advance"]),
        net=as_float(r["net"]),
        remark=r.get("remark"),
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with conflict_on_duplicate(_DUPLICATE_MESSAGE, key=(int(employee_id), period)):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payroll_records(
                        employee_id, labour_card, labour_card_personal_no, period,
                        allowance, deduction, mess, advance, net, remark, created_by
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        int(employee_id),
                        labour_card,
                        labour_card_personal_no,
                        period,
                        allowance,
                        deduction,
                        mess,
                        advance,
                        net,
                        remark,
                        int(created_by),
                    ),
                )
                return int(cur.lastrowid)

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_records WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_by_key(self, employee_id: int, period: str, *, exclude_id: Optional[int] = None) -> Optional[PayrollRecord]:
        sql = f"SELECT {_COLUMNS} FROM payroll_records WHERE employee_id=%s AND period=%s"
        params: list[Any] = [int(employee_id), period]
        if exclude_id is not None:
            sql += " AND payroll_id<>%s"
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def update(self, payroll_id: int, fields: Mapping[str, Any]) -> bool:
        columns = [c for c in fields if c in _UPDATABLE]
        if not columns:
            return self.get_by_id(payroll_id) is not None

        assignments = ", ".join(f"{c}=%s" for c in columns)
        params = [fields[c] for c in columns] + [int(payroll_id)]
        with conflict_on_duplicate(_DUPLICATE_MESSAGE, key=(fields.get("employee_id"), fields.get("period"))):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE payroll_records SET {assignments} WHERE payroll_id=%s", tuple(params))
                # rowcount is 0 when values are unchanged, so existence is checked separately
                if cur.rowcount:
                    return True
                cur.execute("SELECT 1 AS found FROM payroll_records WHERE payroll_id=%s", (int(payroll_id),))
                return fetchone(cur) is not None

    def delete(self, payroll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payroll_records WHERE payroll_id=%s", (int(payroll_id),))
            return cur.rowcount > 0

    def list(
        self,
        filters: PayrollFilters,
        *,
        created: Optional[DateInterval] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[Sequence[PayrollRecord], int]:
        where = ["1=1"]
        params: list[Any] = []

        if filters.employee_id:
            where.append("employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.period:
            where.append("period=%s")
            params.append(filters.period)
        if filters.labour_card:
            where.append("labour_card=%s")
            params.append(filters.labour_card)
        if filters.labour_card_personal_no:
            where.append("labour_card_personal_no=%s")
            params.append(filters.labour_card_personal_no)
        if created:
            where.append("created_at >= %s AND created_at < %s")
            params.extend([created.start, created.end])

        where_sql = " AND ".join(where)
        # period is "MM-YYYY": order by year, then month
        sql = f"""
            SELECT {_COLUMNS}
            FROM payroll_records
            WHERE {where_sql}
            ORDER BY SUBSTRING(period, 4, 4) DESC, SUBSTRING(period, 1, 2) DESC, created_at DESC, payroll_id DESC
        """
        page_params = list(params)
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            page_params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM payroll_records WHERE {where_sql}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(sql, tuple(page_params))
            rows = [_to_record(r) for r in fetchall(cur)]
        return rows, total
