from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles supplied by the identity provider."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    FINANCE = "finance"
    HR = "hr"
    PROJECT_MANAGER = "project_manager"
    ENGINEER = "engineer"
    DRIVER = "driver"
    WORKER = "worker"


class AttendanceType(str, Enum):
    """Scope of an attendance mark."""

    PROJECT = "project"
    NORMAL = "normal"


class Granularity(str, Enum):
    """Bucket size for per-project attendance breakdowns."""

    MONTHLY = "monthly"
    WEEKLY = "weekly"


ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
PAYROLL_WRITER_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.ACCOUNTANT})
ANALYTICS_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.HR})
FIELD_ROLES = frozenset({Role.DRIVER, Role.WORKER})
