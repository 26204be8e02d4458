from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from flask import Flask, request, session

from ..common.datetime_utils import now_local, parse_iso_date, parse_iso_datetime
from ..common.http import (
    admin_required,
    current_employee_id,
    json_body,
    login_required,
    ok,
    optional_query_id,
    query_int,
)
from ..common.validators import require_enum
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ManualAttendanceUpdate
from .shift_rules import parse_clock


def _parse_moment(value: Optional[str], day: date) -> Optional[datetime]:
    """Accept either a full ISO timestamp or an ``HH:MM`` time on ``day``."""
    if not value:
        return None
    if len(value) <= 5 and ":" in value:
        return datetime.combine(day, parse_clock(value))
    return parse_iso_datetime(value)


def _optional_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError("working_hours must be a number")


def _date_arg(name: str, default: date) -> date:
    raw = request.args.get(name)
    return parse_iso_date(raw) if raw else default


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    stats = container.statistics_service

    def _history_for(employee_id: int):
        today = now_local().date()
        history = service.get_history(
            employee_id,
            year=query_int("year", today.year),
            month=query_int("month", today.month),
            page=query_int("page", 1),
            limit=query_int("limit", DEFAULT_HISTORY_LIMIT),
        )
        return ok(history)

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def check_in():
        result = service.check_in(current_employee_id())
        return ok(result, message=result.message)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def check_out():
        result = service.check_out(current_employee_id())
        return ok(result, message=f"Checked out successfully. Status: {result.status.value}")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        return ok(service.get_today(current_employee_id()))

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def my_history():
        return _history_for(current_employee_id())

    @app.route("/api/attendance/employee/<int:employee_id>/history", methods=["GET"], endpoint="attendance_employee_history")
    @admin_required
    def employee_history(employee_id: int):
        return _history_for(employee_id)

    @app.route("/api/attendance/manual", methods=["POST"], endpoint="attendance_manual")
    @admin_required
    def mark_manual():
        body = json_body()
        if not body.get("employee_id") or not body.get("date") or not body.get("status"):
            raise ValidationError("employee_id, date and status are required")

        work_date = parse_iso_date(body["date"])
        update = ManualAttendanceUpdate(
            employee_id=int(body["employee_id"]),
            work_date=work_date,
            status=require_enum(AttendanceStatus, body["status"], "status"),
            remarks=body.get("remarks"),
            check_in_time=_parse_moment(body.get("check_in"), work_date),
            check_out_time=_parse_moment(body.get("check_out"), work_date),
            working_hours=_optional_float(body.get("working_hours")),
        )
        record = service.mark_manual(update, marked_by=session.get("employee_id"))
        return ok(record, message="Attendance marked successfully")

    @app.route("/api/attendance/statistics", methods=["GET"], endpoint="attendance_statistics")
    @admin_required
    def statistics():
        today_ = now_local().date()
        result = stats.statistics(
            _date_arg("start_date", today_),
            _date_arg("end_date", today_),
            department_id=optional_query_id("department"),
            shift_id=optional_query_id("shift"),
        )
        return ok(result)

    @app.route("/api/attendance/today-details", methods=["GET"], endpoint="attendance_today_details")
    @admin_required
    def today_details():
        result = stats.today_details(
            _date_arg("date", now_local().date()),
            department_id=optional_query_id("department"),
            shift_id=optional_query_id("shift"),
        )
        return ok(result)

    @app.route("/api/attendance/all", methods=["GET"], endpoint="attendance_all")
    @admin_required
    def all_employees():
        result = stats.daily_roster(
            _date_arg("date", now_local().date()),
            department_id=optional_query_id("department"),
            shift_id=optional_query_id("shift"),
            status=request.args.get("status"),
            page=query_int("page", 1),
            limit=query_int("limit", 50),
        )
        return ok(result)

    @app.route("/api/attendance/auto-checkout", methods=["POST"], endpoint="attendance_auto_checkout")
    @admin_required
    def run_auto_checkout():
        report = container.auto_checkout()
        return ok(report, message=f"Auto-checked out {len(report.checked_out)} record(s)")
