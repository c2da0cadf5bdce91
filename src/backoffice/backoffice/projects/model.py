from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class Project:
    """Project master data: who is assigned and who drives the crew."""

    project_id: int
    project_name: str
    assigned_driver_id: Optional[int] = None
    assigned_worker_ids: FrozenSet[int] = field(default_factory=frozenset)

    def is_assigned(self, employee_id: int) -> bool:
        return employee_id in self.assigned_worker_ids or employee_id == self.assigned_driver_id

    def is_driver(self, employee_id: int) -> bool:
        return self.assigned_driver_id is not None and employee_id == self.assigned_driver_id
