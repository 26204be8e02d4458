from __future__ import annotations

from flask import Flask

from ..common.http import admin_required, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError
from .model import ShiftUpdate

_UPDATABLE = (
    "name",
    "display_name",
    "start_time",
    "end_time",
    "is_cross_midnight",
    "grace_minutes",
    "minimum_hours",
    "description",
    "is_active",
)


def register(app: Flask, container: Container) -> None:
    service = container.shift_service

    @app.route("/api/shifts", methods=["GET"], endpoint="shift_list")
    @login_required
    def list_shifts():
        return ok(service.list_shifts())

    @app.route("/api/shifts/<int:shift_id>", methods=["GET"], endpoint="shift_get")
    @login_required
    def get_shift(shift_id: int):
        return ok(service.get(shift_id))

    @app.route("/api/shifts", methods=["POST"], endpoint="shift_create")
    @admin_required
    def create_shift():
        body = json_body()
        for key in ("name", "display_name", "start_time", "end_time"):
            if not body.get(key):
                raise ValidationError("Name, display name, start time, and end time are required")

        shift = service.create(
            name=body["name"],
            display_name=body["display_name"],
            start_time=body["start_time"],
            end_time=body["end_time"],
            is_cross_midnight=body.get("is_cross_midnight"),
            grace_minutes=body.get("grace_minutes"),
            minimum_hours=body.get("minimum_hours"),
            description=body.get("description"),
        )
        return ok(shift, message="Shift created successfully", status=201)

    @app.route("/api/shifts/<int:shift_id>", methods=["PUT"], endpoint="shift_update")
    @admin_required
    def update_shift(shift_id: int):
        body = json_body()
        update = ShiftUpdate(**{key: body[key] for key in _UPDATABLE if key in body})
        return ok(service.update(shift_id, update), message="Shift updated successfully")

    @app.route("/api/shifts/<int:shift_id>", methods=["DELETE"], endpoint="shift_delete")
    @admin_required
    def delete_shift(shift_id: int):
        service.delete(shift_id)
        return ok(message="Shift deleted successfully")
