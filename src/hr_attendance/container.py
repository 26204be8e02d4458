from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable

from .attendance.auto_checkout import SweepReport, auto_checkout_open_records
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import AUTO_CHECKOUT_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .reports.service import AttendanceStatisticsService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    shifts_repo: MySQLShiftRepository
    attendance_repo: MySQLAttendanceRepository
    leaves_repo: MySQLLeaveRepository

    attendance_service: AttendanceService
    leave_service: LeaveService
    shift_service: ShiftService
    statistics_service: AttendanceStatisticsService
    auto_checkout: Callable[[], SweepReport]


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)

    strategy_factory = AttendanceStrategyFactory()
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        shifts_repo,
        leaves_repo,
        strategy_factory=strategy_factory,
        enforce_check_in_window=bool(getattr(settings, "ENFORCE_CHECK_IN_WINDOW", False)),
    )
    leave_service = LeaveService(leaves_repo, employees_repo, attendance_repo)
    shift_service = ShiftService(shifts_repo, employees_repo)
    statistics_service = AttendanceStatisticsService(attendance_repo, employees_repo)
    auto_checkout = partial(
        auto_checkout_open_records,
        attendance_repo,
        shifts_repo,
        threshold_hours=float(getattr(settings, "AUTO_CHECKOUT_HOURS", AUTO_CHECKOUT_HOURS)),
        strategy_factory=strategy_factory,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        shifts_repo=shifts_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        attendance_service=attendance_service,
        leave_service=leave_service,
        shift_service=shift_service,
        statistics_service=statistics_service,
        auto_checkout=auto_checkout,
    )
