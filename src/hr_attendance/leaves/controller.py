from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import admin_required, current_employee_id, json_body, login_required, ok, query_int
from ..container import Container
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.exceptions import ValidationError
from .model import LeaveApplication


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.route("/api/leaves", methods=["POST"], endpoint="leave_apply")
    @login_required
    def apply_leave():
        body = json_body()
        for key in ("leave_type", "from_date", "end_date", "reason"):
            if not body.get(key):
                raise ValidationError("All fields are required")

        application = LeaveApplication(
            leave_type=body["leave_type"],
            from_date=parse_iso_date(body["from_date"]),
            end_date=parse_iso_date(body["end_date"]),
            reason=body["reason"],
            is_half_day=bool(body.get("is_half_day", False)),
            half_day_period=body.get("half_day_period"),
        )
        applied = service.apply(current_employee_id(), application)
        return ok(applied, message="Leave application submitted successfully", status=201)

    @app.route("/api/leaves/balance", methods=["GET"], endpoint="leave_balance")
    @login_required
    def leave_balance():
        return ok(service.balance(current_employee_id()))

    @app.route("/api/leaves/breakdown", methods=["GET"], endpoint="leave_breakdown")
    @login_required
    def leave_breakdown():
        year = query_int("year", now_local().year)
        return ok({"year": year, "breakdown": service.breakdown(current_employee_id(), year=year)})

    @app.route("/api/leaves", methods=["GET"], endpoint="leave_list")
    @admin_required
    def list_leaves():
        page = service.list_leaves(
            status=request.args.get("status"),
            leave_type=request.args.get("leave_type"),
            page=query_int("page", 1),
            limit=query_int("limit", DEFAULT_PAGE_SIZE),
        )
        return ok(
            {
                "leaves": page.leaves,
                "pagination": {
                    "current_page": page.current_page,
                    "total_pages": page.total_pages,
                    "total_count": page.total_count,
                    "has_next_page": page.has_next_page,
                    "has_prev_page": page.has_prev_page,
                },
            }
        )

    @app.route("/api/leaves/<int:leave_id>/status", methods=["PUT"], endpoint="leave_review")
    @admin_required
    def review_leave(leave_id: int):
        body = json_body()
        status = body.get("status")
        leave = service.review(leave_id, status, comments=body.get("comments", ""))
        suffix = " and attendance marked" if status == "approved" else ""
        return ok(leave, message=f"Leave {status} successfully{suffix}")
