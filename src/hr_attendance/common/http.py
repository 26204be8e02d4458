"""Shared pieces of the Flask controller layer.

Caller identity (``employee_id``, ``role``) is put on the session by the
authentication layer; controllers only read it.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, PolicyRejection, ValidationError
from .serialization import to_json

logger = logging.getLogger(__name__)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session and session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "error": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "role" not in session:
            return jsonify({"success": False, "error": "Authentication required"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "error": "Admin access required"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_employee_id() -> int:
    if "employee_id" not in session:
        raise AuthorizationError("No employee profile is linked to this account")
    return int(session["employee_id"])


def optional_query_id(name: str) -> Optional[int]:
    """Read an id filter; missing, empty or ``all`` means no filter."""
    raw = request.args.get(name)
    if raw is None or raw in {"", "all"}:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def query_int(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def ok(payload=None, *, message: str | None = None, status: int = 200):
    body = {"success": True}
    if message:
        body["message"] = message
    if payload is not None:
        body["data"] = to_json(payload)
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PolicyRejection)
    def _policy(e: PolicyRejection):
        body = {"success": False, "error": str(e)}
        if e.details:
            body["details"] = to_json(e.details)
        return jsonify(body), 400

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify({"success": False, "error": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"success": False, "error": str(e)}), 404

    @app.errorhandler(AuthorizationError)
    def _forbidden(e: AuthorizationError):
        return jsonify({"success": False, "error": str(e)}), 403

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        logger.warning("Unhandled domain error on %s: %s", request.path, e)
        return jsonify({"success": False, "error": str(e)}), 409

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "error": e.description}), e.code
        logger.exception("Request %s %s failed", request.method, request.path)
        return jsonify({"success": False, "error": "Internal server error"}), 500
