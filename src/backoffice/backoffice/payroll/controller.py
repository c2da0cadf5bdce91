from __future__ import annotations

import io

import pandas as pd
from flask import Flask, request, send_file

from ..common.http import current_caller, json_body, login_required, ok, roles_required
from ..core.enums import PAYROLL_WRITER_ROLES
from ..container import Container

EXPORT_COLUMNS = [
    "S/NO",
    "NAME",
    "Designation",
    "EMIRATES ID",
    "LABOUR CARD",
    "LABOUR CARD PERSONAL NO",
    "PERIOD",
    "BASIC",
    "ALLOWANCE",
    "OT",
    "TOTAL EARNING",
    "DEDUCTION",
    "MESS",
    "ADVANCE",
    "NET",
    "REMARK",
]


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    def _filters_from_args():
        args = request.args
        filters = service.build_filters(
            employee_id=args.get("employee_id"),
            period=args.get("period"),
            labour_card=args.get("labour_card"),
            labour_card_personal_no=args.get("labour_card_personal_no"),
        )
        created = {
            "start": args.get("start_date"),
            "end": args.get("end_date"),
            "year": args.get("year"),
            "month": args.get("month"),
        }
        return filters, created

    def _write_payroll_xlsx(rows: list[dict], filename: str):
        """Render export rows to an in-memory workbook and send it."""

        df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Payroll")
        output.seek(0)
        return send_file(
            output,
            download_name=filename,
            as_attachment=True,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    @app.route("/api/payroll", methods=["POST"], endpoint="payroll_create")
    @roles_required(PAYROLL_WRITER_ROLES)
    def create():
        caller = current_caller()
        data = json_body()
        row = service.create_payroll(
            employee_id=data.get("employee_id"),
            period=data.get("period"),
            labour_card=data.get("labour_card"),
            labour_card_personal_no=data.get("labour_card_personal_no"),
            allowance=data.get("allowance"),
            deduction=data.get("deduction"),
            mess=data.get("mess"),
            advance=data.get("advance"),
            remark=data.get("remark"),
            created_by=caller.user_id,
            current_role=caller.role,
        )
        return ok(row.to_dict(), "Payroll created successfully", 201)

    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_list")
    @login_required
    def list_payrolls():
        filters, created = _filters_from_args()
        result = service.list_payrolls(
            filters,
            page=request.args.get("page"),
            limit=request.args.get("limit"),
            **created,
        )
        return ok(
            {"payrolls": [r.to_dict() for r in result.rows], "pagination": result.pagination()},
            "Payrolls retrieved successfully",
        )

    @app.route("/api/payroll/export.xlsx", methods=["GET"], endpoint="payroll_export")
    @login_required
    def export():
        filters, created = _filters_from_args()
        rows = service.export_rows(filters, **created)
        return _write_payroll_xlsx(rows, "payroll_report.xlsx")

    @app.route("/api/payroll/<int:payroll_id>", methods=["GET"], endpoint="payroll_get")
    @login_required
    def get(payroll_id: int):
        return ok(service.get_payroll(payroll_id).to_dict(), "Payroll retrieved successfully")

    @app.route("/api/payroll/<int:payroll_id>", methods=["PUT"], endpoint="payroll_update")
    @roles_required(PAYROLL_WRITER_ROLES)
    def update(payroll_id: int):
        row = service.update_payroll(payroll_id, json_body(), current_role=current_caller().role)
        return ok(row.to_dict(), "Payroll updated successfully")

    @app.route("/api/payroll/<int:payroll_id>", methods=["DELETE"], endpoint="payroll_delete")
    @roles_required(PAYROLL_WRITER_ROLES)
    def delete(payroll_id: int):
        service.delete_payroll(payroll_id, current_role=current_caller().role)
        return ok(None, "Payroll deleted successfully")
