from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, conflict_on_duplicate, db_cursor, fetchall, fetchone
from ..periods.resolver import DateInterval
from .model import AttendanceRecord, UpsertResult
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, type, project_id, present,
    working_hours, overtime_hours, marked_by, created_at, updated_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        type=AttendanceType(r["type"]),
        project_id=int(r["project_id"]) if r.get("project_id") is not None else None,
        present=bool(r["present"]),
        working_hours=as_float(r["working_hours"]),
        overtime_hours=as_float(r["overtime_hours"]),
        marked_by=int(r["marked_by"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_by_key(
        self,
        *,
        employee_id: int,
        work_date: date,
        type: AttendanceType,
        project_id: Optional[int] = None,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s AND type=%s AND project_scope=%s
                """,
                (int(employee_id), work_date, type.value, int(project_id or 0)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert(
        self,
        *,
        employee_id: int,
        work_date: date,
        type: AttendanceType,
        project_id: Optional[int],
        present: bool,
        working_hours: float,
        overtime_hours: float,
        marked_by: int,
    ) -> UpsertResult:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, type, project_id, present,
                    working_hours, overtime_hours, marked_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    present=VALUES(present),
                    working_hours=VALUES(working_hours),
                    overtime_hours=VALUES(overtime_hours),
                    marked_by=VALUES(marked_by)
                """,
                (
                    int(employee_id),
                    work_date,
                    type.value,
                    project_id,
                    1 if present else 0,
                    working_hours,
                    overtime_hours,
                    int(marked_by),
                ),
            )
            # rowcount: 1 = inserted, 2 = updated, 0 = updated with identical values
            created = cur.rowcount == 1
            if created and cur.lastrowid:
                return UpsertResult(attendance_id=int(cur.lastrowid), created=True)

            cur.execute(
                """
                SELECT attendance_id FROM attendance_records
                WHERE employee_id=%s AND work_date=%s AND type=%s AND project_scope=%s
                """,
                (int(employee_id), work_date, type.value, int(project_id or 0)),
            )
            r = fetchone(cur)
            return UpsertResult(attendance_id=int(r["attendance_id"]) if r else 0, created=created)

    def insert(
        self,
        *,
        employee_id: int,
        work_date: date,
        type: AttendanceType,
        project_id: Optional[int],
        present: bool,
        working_hours: float,
        overtime_hours: float,
        marked_by: int,
    ) -> int:
        key = (int(employee_id), work_date.isoformat(), type.value, project_id)
        with conflict_on_duplicate("Attendance already recorded for this employee and date", key=key):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, type, project_id, present,
                        working_hours, overtime_hours, marked_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        work_date,
                        type.value,
                        project_id,
                        1 if present else 0,
                        working_hours,
                        overtime_hours,
                        int(marked_by),
                    ),
                )
                return int(cur.lastrowid)

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        type: Optional[AttendanceType] = None,
        project_id: Optional[int] = None,
        interval: Optional[DateInterval] = None,
        present: Optional[bool] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if type is not None:
            clauses.append("type=%s")
            params.append(type.value)
        if project_id is not None:
            clauses.append("project_id=%s")
            params.append(int(project_id))
        if interval is not None:
            clauses.append("work_date >= %s AND work_date < %s")
            params.extend([interval.start_date, interval.end_date])
        if present is not None:
            clauses.append("present=%s")
            params.append(1 if present else 0)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                {where}
                ORDER BY work_date ASC, attendance_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def sum_overtime(
        self,
        *,
        employee_id: int,
        interval: DateInterval,
        type: Optional[AttendanceType] = None,
    ) -> float:
        clauses = ["employee_id=%s", "present=1", "work_date >= %s AND work_date < %s"]
        params: list[object] = [int(employee_id), interval.start_date, interval.end_date]
        if type is not None:
            clauses.append("type=%s")
            params.append(type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COALESCE(SUM(overtime_hours), 0) AS total
                FROM attendance_records
                WHERE {' AND '.join(clauses)}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return as_float(r["total"]) if r else 0.0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0
