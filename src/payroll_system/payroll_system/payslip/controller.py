from __future__ import annotations

from io import BytesIO

from flask import Flask, send_file

from ..common.responses import success
from ..common.validators import require_positive_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.payslip_service

    @app.route("/payslip/<int:payroll_id>", methods=["GET"], endpoint="payslip_get")
    def payslip_get(payroll_id: int):
        view = service.compose_payslip(payroll_id)
        return success(view.to_dict(), message="Payslip retrieved")

    @app.route("/payslip/<int:payroll_id>/download", methods=["GET"], endpoint="payslip_download")
    def payslip_download(payroll_id: int):
        document = service.render_document(service.compose_payslip(payroll_id))
        return send_file(
            BytesIO(document.content),
            mimetype=document.mimetype,
            as_attachment=True,
            download_name=document.filename,
        )

    @app.route("/payslip/staff/<staff_id>", methods=["GET"], endpoint="payslip_by_staff")
    def payslip_by_staff(staff_id: str):
        rows = service.get_staff_payslips(require_positive_int(staff_id, "staff_id"))
        return success(
            [r.to_dict() for r in rows],
            message=f"Successfully retrieved {len(rows)} payslips",
            count=len(rows),
        )
