from __future__ import annotations

from dataclasses import dataclass

from .analytics.service import AttendanceAnalyticsService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .expenses.mysql_expense_repository import MySQLExpenseProfileRepository
from .expenses.repository import ExpenseProfileRepository
from .overtime.aggregator import OvertimeAggregator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    projects_repo: ProjectRepository
    expenses_repo: ExpenseProfileRepository
    attendance_repo: AttendanceRepository
    payroll_repo: PayrollRepository

    attendance_service: AttendanceService
    overtime_aggregator: OvertimeAggregator
    payroll_service: PayrollService
    analytics_service: AttendanceAnalyticsService


def wire(
    *,
    employees_repo: EmployeeRepository,
    projects_repo: ProjectRepository,
    expenses_repo: ExpenseProfileRepository,
    attendance_repo: AttendanceRepository,
    payroll_repo: PayrollRepository,
) -> Container:
    """Build services over any set of repositories (MySQL in production, fakes in tests)."""

    overtime_aggregator = OvertimeAggregator(attendance_repo)
    return Container(
        employees_repo=employees_repo,
        projects_repo=projects_repo,
        expenses_repo=expenses_repo,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        attendance_service=AttendanceService(attendance_repo, employees_repo, projects_repo),
        overtime_aggregator=overtime_aggregator,
        payroll_service=PayrollService(payroll_repo, employees_repo, expenses_repo, overtime_aggregator),
        analytics_service=AttendanceAnalyticsService(attendance_repo, employees_repo, projects_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        employees_repo=MySQLEmployeeRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        expenses_repo=MySQLExpenseProfileRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
    )
