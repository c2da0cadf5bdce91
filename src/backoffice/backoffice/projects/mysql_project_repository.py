from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Project
from .repository import ProjectRepository


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, where: str = "", params: tuple = ()) -> list[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT p.project_id, p.project_name, p.assigned_driver_id, pw.user_id AS worker_id
                FROM projects p
                LEFT JOIN project_workers pw ON pw.project_id = p.project_id
                {where}
                ORDER BY p.project_id ASC
                """,
                params,
            )
            rows = fetchall(cur)

        grouped: dict[int, dict] = {}
        for r in rows:
            pid = int(r["project_id"])
            g = grouped.get(pid)
            if not g:
                g = {
                    "project_name": r["project_name"],
                    "driver": r.get("assigned_driver_id"),
                    "workers": set(),
                }
                grouped[pid] = g
            if r.get("worker_id") is not None:
                g["workers"].add(int(r["worker_id"]))

        return [
            Project(
                project_id=pid,
                project_name=g["project_name"],
                assigned_driver_id=int(g["driver"]) if g["driver"] is not None else None,
                assigned_worker_ids=frozenset(g["workers"]),
            )
            for pid, g in grouped.items()
        ]

    def get_by_id(self, project_id: int) -> Optional[Project]:
        found = self._load("WHERE p.project_id=%s", (int(project_id),))
        return found[0] if found else None

    def list_all(self) -> Sequence[Project]:
        return self._load()
