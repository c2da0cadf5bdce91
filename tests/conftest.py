from __future__ import annotations

from datetime import datetime

import pytest

from src.backoffice.backoffice.container import wire
from src.backoffice.backoffice.core.enums import Role

from .fakes import InMemoryAttendance, InMemoryEmployees, InMemoryExpenses, InMemoryPayrolls, InMemoryProjects

ADMIN_ID = 1
DRIVER_ID = 2
WORKER_ID = 3
OTHER_WORKER_ID = 4
ACCOUNTANT_ID = 5
PROJECT_ID = 10


@pytest.fixture
def fixed_now():
    return datetime(2025, 6, 1, 8, 0, 0)


@pytest.fixture
def employees():
    repo = InMemoryEmployees()
    repo.add(ADMIN_ID, "Ava", "Admin", Role.ADMIN)
    repo.add(DRIVER_ID, "Dan", "Driver", Role.DRIVER)
    repo.add(WORKER_ID, "Will", "Worker", Role.WORKER, emirates_id="784-1990-1234567-1")
    repo.add(OTHER_WORKER_ID, "Omar", "Other", Role.WORKER)
    repo.add(ACCOUNTANT_ID, "Amy", "Accounts", Role.ACCOUNTANT)
    return repo


@pytest.fixture
def projects():
    repo = InMemoryProjects()
    repo.add(PROJECT_ID, "Tower A", driver_id=DRIVER_ID, workers=[WORKER_ID])
    return repo


@pytest.fixture
def expenses():
    return InMemoryExpenses()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def payroll_repo():
    return InMemoryPayrolls()


@pytest.fixture
def container(employees, projects, expenses, attendance_repo, payroll_repo):
    return wire(
        employees_repo=employees,
        projects_repo=projects,
        expenses_repo=expenses,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
    )
