from __future__ import annotations

import io

import pandas as pd
import pytest

from src.backoffice.backoffice.core.enums import Role
from src.backoffice.backoffice.main import create_app

from .conftest import ACCOUNTANT_ID, ADMIN_ID, DRIVER_ID, PROJECT_ID, WORKER_ID


@pytest.fixture
def app(container, expenses, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    expenses.set_basic(WORKER_ID, 3000)
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id: int, role: Role) -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role.value


def _payroll_body(**overrides):
    body = {
        "employee_id": WORKER_ID,
        "period": "06-2025",
        "labour_card": "LC-1",
        "labour_card_personal_no": "PN-1",
        "allowance": 200,
        "deduction": 50,
        "mess": 100,
        "advance": 0,
    }
    body.update(overrides)
    return body


def test_requires_session(client):
    resp = client.get(f"/api/attendance/{WORKER_ID}")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_driver_marks_project_attendance(client):
    login(client, DRIVER_ID, Role.DRIVER)
    resp = client.post(
        "/api/attendance/mark",
        json={
            "employee_id": WORKER_ID,
            "date": "2025-06-01",
            "type": "project",
            "project_id": PROJECT_ID,
            "present": True,
            "working_hours": "12:30",
        },
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["working_hours"] == 12.5
    assert data["overtime_hours"] == 2.5
    assert data["marked_by"] == DRIVER_ID

    listed = client.get(f"/api/attendance/{WORKER_ID}?project_id={PROJECT_ID}&year=2025&month=6")
    assert [r["date"] for r in listed.get_json()["data"]] == ["2025-06-01"]


def test_validation_error_names_the_field(client):
    login(client, DRIVER_ID, Role.DRIVER)
    resp = client.post(
        "/api/attendance/mark",
        json={"employee_id": WORKER_ID, "project_id": PROJECT_ID, "present": True, "working_hours": "soon"},
    )
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "invalid working hours format"
    assert body["field"] == "working_hours"


def test_payroll_create_conflict_and_roles(client):
    login(client, ACCOUNTANT_ID, Role.ACCOUNTANT)
    created = client.post("/api/payroll", json=_payroll_body())
    assert created.status_code == 201
    assert created.get_json()["data"]["net"] == 3050

    duplicate = client.post("/api/payroll", json=_payroll_body(allowance=1))
    assert duplicate.status_code == 409

    login(client, ADMIN_ID, Role.HR)
    forbidden = client.post("/api/payroll", json=_payroll_body(period="07-2025"))
    assert forbidden.status_code == 403


def test_payroll_list_and_missing(client):
    login(client, ACCOUNTANT_ID, Role.ACCOUNTANT)
    client.post("/api/payroll", json=_payroll_body())

    listed = client.get("/api/payroll?period=06-2025").get_json()["data"]
    assert listed["pagination"]["total"] == 1
    assert listed["payrolls"][0]["total_earning"] == 3200

    assert client.get("/api/payroll/999").status_code == 404


def test_payroll_export_xlsx(client):
    login(client, ACCOUNTANT_ID, Role.ACCOUNTANT)
    client.post("/api/payroll", json=_payroll_body())

    resp = client.get("/api/payroll/export.xlsx")
    assert resp.status_code == 200
    assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    df = pd.read_excel(io.BytesIO(resp.data), engine="openpyxl")
    assert list(df.columns)[:3] == ["S/NO", "NAME", "Designation"]
    assert df.loc[0, "NET"] == 3050


def test_analytics_restricted_to_reporting_roles(client):
    login(client, DRIVER_ID, Role.DRIVER)
    assert client.get("/api/analytics/overview?year=2025").status_code == 403

    login(client, ADMIN_ID, Role.HR)
    resp = client.get("/api/analytics/overview?year=2025")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["overall_attendance"] == 0
