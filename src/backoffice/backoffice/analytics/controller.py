from __future__ import annotations

from flask import Flask, request

from ..common.http import ok, roles_required
from ..core.constants import DEFAULT_TREND_MONTHS
from ..core.enums import ANALYTICS_ROLES
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.analytics_service

    @app.route("/api/analytics/overview", methods=["GET"], endpoint="analytics_overview")
    @roles_required(ANALYTICS_ROLES)
    def overview():
        return ok(service.overview_stats(year=request.args.get("year")), "Overview stats retrieved successfully")

    @app.route("/api/analytics/employee/<int:employee_id>", methods=["GET"], endpoint="analytics_employee")
    @roles_required(ANALYTICS_ROLES)
    def employee_trend(employee_id: int):
        data = service.employee_trend(employee_id, months=request.args.get("months", DEFAULT_TREND_MONTHS))
        return ok(data, "Employee trend data retrieved successfully")

    @app.route("/api/analytics/projects", methods=["GET"], endpoint="analytics_projects")
    @roles_required(ANALYTICS_ROLES)
    def projects():
        return ok({"project_stats": service.all_projects_stats()}, "All projects stats retrieved successfully")

    @app.route("/api/analytics/projects/<int:project_id>", methods=["GET"], endpoint="analytics_project")
    @roles_required(ANALYTICS_ROLES)
    def project(project_id: int):
        data = service.project_analytics(project_id, granularity=request.args.get("period"))
        return ok(data, "Project analytics retrieved successfully")
