from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_body, success
from ..common.validators import (
    optional_date,
    optional_positive_int,
    require_date,
    require_enum,
    require_positive_int,
)
from ..container import Container
from ..core.enums import PayrollStatus
from .model import PayrollChanges


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    def _optional_status(value):
        if value in (None, ""):
            return None
        return require_enum(value, PayrollStatus, "status")

    @app.route("/payroll", methods=["GET"], endpoint="payroll_list")
    def payroll_list():
        args = request.args
        rows = service.list_payrolls(
            staff_id=optional_positive_int(args.get("staff_id"), "staff_id"),
            status=_optional_status(args.get("status")),
        )
        return success(
            [r.to_dict() for r in rows],
            message="Successfully retrieved payroll records",
            count=len(rows),
        )

    @app.route("/payroll/staff/<staff_id>", methods=["GET"], endpoint="payroll_by_staff")
    def payroll_by_staff(staff_id: str):
        rows = service.list_by_staff(require_positive_int(staff_id, "staff_id"))
        return success(
            [r.to_dict() for r in rows],
            message=f"Successfully retrieved {len(rows)} payroll records",
            count=len(rows),
        )

    @app.route("/payroll/<int:payroll_id>", methods=["GET"], endpoint="payroll_get")
    def payroll_get(payroll_id: int):
        payroll = service.get_payroll(payroll_id)
        return success(payroll.to_dict(include_details=True), message="Payroll record retrieved")

    @app.route("/payroll", methods=["POST"], endpoint="payroll_create")
    def payroll_create():
        payload = json_body()
        payroll = service.create_payroll(
            staff_id=require_positive_int(payload.get("staff_id"), "staff_id"),
            period_start=require_date(payload.get("period_start"), "period_start"),
            period_end=require_date(payload.get("period_end"), "period_end"),
            status=_optional_status(payload.get("status")) or PayrollStatus.DRAFT,
            details=service.parse_details(payload.get("details")),
        )
        return success(
            payroll.to_dict(include_details=True),
            message="Payroll created successfully",
            status=201,
        )

    @app.route("/payroll/<int:payroll_id>", methods=["PUT"], endpoint="payroll_update")
    def payroll_update(payroll_id: int):
        payload = json_body()
        changes = PayrollChanges(
            staff_id=optional_positive_int(payload.get("staff_id"), "staff_id"),
            period_start=optional_date(payload.get("period_start"), "period_start"),
            period_end=optional_date(payload.get("period_end"), "period_end"),
            status=_optional_status(payload.get("status")),
        )
        # A "details" list, even an empty one, replaces every line item.
        raw_details = payload.get("details")
        details = None if raw_details is None else service.parse_details(raw_details)
        payroll = service.update_payroll(payroll_id, changes, details)
        return success(payroll.to_dict(include_details=True), message="Payroll updated successfully")

    @app.route("/payroll/<int:payroll_id>/status", methods=["PATCH"], endpoint="payroll_status")
    def payroll_status(payroll_id: int):
        payload = json_body()
        payroll = service.update_status(payroll_id, payload.get("status"))
        return success(payroll.to_dict(), message=f"Payroll status updated to {payroll.status.value}")

    @app.route("/payroll/<int:payroll_id>", methods=["DELETE"], endpoint="payroll_delete")
    def payroll_delete(payroll_id: int):
        service.delete_payroll(payroll_id)
        return success(message="Payroll deleted successfully")
