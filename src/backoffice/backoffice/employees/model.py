from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Employee master data as seen by this core (read-only)."""

    employee_id: int
    first_name: str
    last_name: str
    role: Role
    emirates_id: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
