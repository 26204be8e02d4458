from datetime import date, datetime
from functools import partial
from types import SimpleNamespace

import pytest
from flask import Flask

import hr_attendance.attendance.service as attendance_service_module
import hr_attendance.leaves.service as leave_service_module
from hr_attendance.attendance import controller as attendance_controller
from hr_attendance.attendance.auto_checkout import auto_checkout_open_records
from hr_attendance.attendance.model import AttendanceRecord
from hr_attendance.attendance.service import AttendanceService
from hr_attendance.common.http import register_error_handlers
from hr_attendance.core.enums import AttendanceStatus, LeaveStatus
from hr_attendance.leaves import controller as leaves_controller
from hr_attendance.leaves.service import LeaveService
from hr_attendance.reports.service import AttendanceStatisticsService
from hr_attendance.shifts import controller as shifts_controller
from hr_attendance.shifts.service import ShiftService

NOW = datetime(2024, 5, 10, 9, 5)


@pytest.fixture
def app(attendance_repo, employees_repo, shifts_repo, leaves_repo, monkeypatch):
    monkeypatch.setattr(attendance_service_module, "now_local", lambda: NOW)
    monkeypatch.setattr(leave_service_module, "now_local", lambda: NOW)

    container = SimpleNamespace(
        attendance_service=AttendanceService(attendance_repo, employees_repo, shifts_repo, leaves_repo),
        leave_service=LeaveService(leaves_repo, employees_repo, attendance_repo),
        shift_service=ShiftService(shifts_repo, employees_repo),
        statistics_service=AttendanceStatisticsService(attendance_repo, employees_repo),
        auto_checkout=partial(auto_checkout_open_records, attendance_repo, shifts_repo, now=datetime(2024, 5, 11, 9, 0)),
    )

    flask_app = Flask(__name__)
    flask_app.secret_key = "test"
    flask_app.config["TESTING"] = True
    register_error_handlers(flask_app)
    attendance_controller.register(flask_app, container)
    leaves_controller.register(flask_app, container)
    shifts_controller.register(flask_app, container)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, *, employee_id=None, role="employee"):
    with client.session_transaction() as sess:
        if employee_id is not None:
            sess["employee_id"] = employee_id
        sess["role"] = role


def test_anonymous_request_is_rejected(client):
    resp = client.post("/api/attendance/check-in")

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Authentication required"}


def test_employee_cannot_reach_admin_routes(client):
    _login(client, employee_id=1)

    resp = client.get("/api/leaves")

    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Admin access required"


def test_admin_without_employee_profile_cannot_check_in(client):
    _login(client, role="admin")

    resp = client.post("/api/attendance/check-in")

    assert resp.status_code == 403


def test_check_in_then_duplicate_is_rejected_with_details(client):
    _login(client, employee_id=1)

    first = client.post("/api/attendance/check-in")
    assert first.status_code == 200
    body = first.get_json()
    assert body["success"] is True
    assert body["data"]["shift_day"] == "2024-05-10"
    assert body["data"]["status"] == "present"

    second = client.post("/api/attendance/check-in")
    assert second.status_code == 400
    payload = second.get_json()
    assert payload["error"] == "Already checked in for this shift"
    assert payload["details"]["shift_date"] == "2024-05-10"


def test_check_in_without_shift_is_a_policy_rejection(client):
    _login(client, employee_id=3)

    resp = client.post("/api/attendance/check-in")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No shift assigned. Please contact HR."


def test_today_reports_not_checked_in(client):
    _login(client, employee_id=1)

    data = client.get("/api/attendance/today").get_json()["data"]

    assert data["has_checked_in"] is False
    assert data["has_checked_out"] is False


def test_history_rejects_non_numeric_month(client):
    _login(client, employee_id=1)

    resp = client.get("/api/attendance/history?month=may")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "month must be an integer"


def test_apply_leave_returns_created(client):
    _login(client, employee_id=1)

    resp = client.post(
        "/api/leaves",
        json={"leave_type": "casual", "from_date": "2024-05-21", "end_date": "2024-05-21", "reason": "family"},
    )

    assert resp.status_code == 201
    assert resp.get_json()["data"]["leave"]["status"] == "pending"


def test_apply_leave_requires_all_fields(client):
    _login(client, employee_id=1)

    resp = client.post("/api/leaves", json={"leave_type": "casual"})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "All fields are required"


def test_admin_approves_leave_and_attendance_is_marked(client, leaves_repo, attendance_repo, casual_leave):
    leaves_repo.add(casual_leave(7, from_date=date(2024, 6, 3), end_date=date(2024, 6, 4)))
    _login(client, role="admin")

    resp = client.put("/api/leaves/7/status", json={"status": "approved", "comments": "enjoy"})

    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Leave approved successfully and attendance marked"
    assert leaves_repo.get_by_id(7).status == LeaveStatus.APPROVED
    assert len(attendance_repo.rows) == 2


def test_deleting_assigned_shift_is_blocked(client):
    _login(client, role="admin")

    resp = client.delete("/api/shifts/1")

    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"assigned_employees": 1}


def test_unknown_shift_is_not_found(client):
    _login(client, role="admin")

    resp = client.get("/api/shifts/404")

    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "error": "Shift not found"}


def test_create_shift_returns_created(client):
    _login(client, role="admin")

    resp = client.post(
        "/api/shifts",
        json={"name": "Morning", "display_name": "Early 06-14", "start_time": "06:00", "end_time": "14:00"},
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["start_time"] == "06:00"
    assert data["is_cross_midnight"] is False


def test_statistics_filters_accept_all(client):
    _login(client, role="admin")

    resp = client.get("/api/attendance/statistics?start_date=2024-05-10&end_date=2024-05-10&department=all")

    assert resp.status_code == 200
    assert resp.get_json()["data"]["total_absent"] == 3


def test_manual_auto_checkout_trigger(client, attendance_repo):
    attendance_repo.add(
        AttendanceRecord(
            attendance_id=1,
            employee_id=1,
            work_date=date(2024, 5, 10),
            status=AttendanceStatus.PRESENT,
            shift_id=1,
            check_in_time=datetime(2024, 5, 10, 9, 0),
        )
    )
    _login(client, role="admin")

    resp = client.post("/api/attendance/auto-checkout")

    assert resp.status_code == 200
    assert resp.get_json()["data"]["checked_out"] == [1]


def test_unknown_route_stays_a_404(client):
    resp = client.get("/api/nowhere")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
