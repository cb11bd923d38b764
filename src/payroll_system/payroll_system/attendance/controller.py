from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_body, success
from ..common.datetime_utils import parse_clock_time
from ..common.validators import (
    optional_date,
    optional_positive_int,
    require_date,
    require_enum,
    require_positive_int,
)
from ..container import Container
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from ..core.enums import AttendanceStatus, ClockType
from ..core.exceptions import ValidationError
from .model import AttendanceFilters


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _optional_time(payload: dict, key: str):
        value = payload.get(key)
        if value in (None, ""):
            return None
        return parse_clock_time(value, key)

    @app.route("/attendance", methods=["GET"], endpoint="attendance_list")
    def attendance_list():
        args = request.args
        status = args.get("status")
        filters = AttendanceFilters(
            staff_id=optional_positive_int(args.get("staff_id"), "staff_id"),
            work_date=optional_date(args.get("date"), "date"),
            start_date=optional_date(args.get("start_date"), "start_date"),
            end_date=optional_date(args.get("end_date"), "end_date"),
            status=require_enum(status, AttendanceStatus, "status") if status else None,
        )
        page = optional_positive_int(args.get("page"), "page") or DEFAULT_PAGE
        limit = optional_positive_int(args.get("limit"), "limit") or DEFAULT_PAGE_LIMIT

        result = service.list_records(filters, page=page, limit=limit)
        return success(
            [r.to_dict() for r in result.rows],
            message="Successfully retrieved attendance records",
            count=len(result.rows),
            pagination=result.pagination(),
        )

    @app.route("/attendance", methods=["POST"], endpoint="attendance_create")
    def attendance_create():
        payload = json_body()
        staff_id = require_positive_int(payload.get("staff_id"), "staff_id")
        work_date = require_date(payload.get("date"), "date")
        if not payload.get("status"):
            raise ValidationError("Employee ID, date, and status are required fields")
        status = require_enum(payload.get("status"), AttendanceStatus, "status")

        record = service.create_record(
            staff_id=staff_id,
            work_date=work_date,
            status=status,
            check_in=_optional_time(payload, "check_in"),
            check_out=_optional_time(payload, "check_out"),
        )
        return success(record.to_dict(), message="Attendance record created successfully", status=201)

    @app.route("/attendance/clock", methods=["POST"], endpoint="attendance_clock")
    def attendance_clock():
        payload = json_body()
        if not payload.get("staff_id") or not payload.get("type"):
            raise ValidationError("Employee ID and clock type are required fields")
        staff_id = require_positive_int(payload.get("staff_id"), "staff_id")
        clock_type = require_enum(payload.get("type"), ClockType, "clock type")

        record = service.clock(staff_id, clock_type)
        if clock_type == ClockType.CHECK_IN:
            return success(record.to_dict(), message="Clock in successful", status=201)
        return success(
            record.to_dict(),
            message=f"Clock out successful, total work hours: {record.total_hours} hours",
        )

    @app.route("/attendance/staff/<staff_id>", methods=["GET"], endpoint="attendance_by_staff")
    def attendance_by_staff(staff_id: str):
        rows = service.list_for_staff(require_positive_int(staff_id, "Employee ID"))
        return success(
            [r.to_dict() for r in rows],
            message=f"Successfully retrieved {len(rows)} attendance records",
            count=len(rows),
        )

    @app.route("/attendance/report", methods=["GET"], endpoint="attendance_report")
    def attendance_report():
        args = request.args
        rows = service.aggregate_report(
            staff_id=optional_positive_int(args.get("staff_id"), "staff_id"),
            start_date=optional_date(args.get("start_date"), "start_date"),
            end_date=optional_date(args.get("end_date"), "end_date"),
            month=args.get("month") or None,
        )
        return success(
            [r.to_dict() for r in rows],
            message="Attendance report generated successfully",
            count=len(rows),
        )

    @app.route("/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    def attendance_update(attendance_id: int):
        record = service.update_record(attendance_id, json_body())
        return success(record.to_dict(), message="Attendance record updated successfully")

    @app.route("/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    def attendance_delete(attendance_id: int):
        service.delete_record(attendance_id)
        return success(message="Attendance record deleted successfully")
