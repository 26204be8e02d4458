from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_MINIMUM_HOURS
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, PolicyRejection, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leaves.repository import LeaveRepository
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, ManualAttendanceUpdate
from .repository import AttendanceRepository
from .shift_rules import resolve_shift_day, validate_check_in, working_hours

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckInResult:
    employee_id: int
    shift_day: date
    check_in_time: datetime
    status: AttendanceStatus
    is_late: bool
    late_by_minutes: int
    message: str
    shift_name: str


@dataclass(frozen=True)
class CheckOutResult:
    attendance_id: int
    shift_day: date
    check_in_time: datetime
    check_out_time: datetime
    working_hours: float
    status: AttendanceStatus


@dataclass(frozen=True)
class TodayAttendance:
    has_checked_in: bool
    has_checked_out: bool
    status: str
    working_hours: float = 0
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    is_late: bool = False
    late_by_minutes: int = 0
    shift_day: Optional[date] = None
    shift_name: Optional[str] = None
    shift_start: Optional[str] = None
    shift_end: Optional[str] = None
    is_cross_midnight: bool = False
    message: Optional[str] = None


@dataclass(frozen=True)
class AttendanceHistory:
    year: int
    month: int
    records: Sequence[AttendanceRecord]
    statistics: dict
    current_page: int
    total_pages: int
    total_count: int


def status_counts(records: Sequence[AttendanceRecord]) -> dict:
    stats = {status.value: 0 for status in AttendanceStatus}
    total_hours = 0.0
    for r in records:
        stats[r.status.value] += 1
        total_hours += r.working_hours or 0
    stats["total_working_hours"] = round(total_hours, 2)
    return stats


def close_open_record(
    attendance: AttendanceRepository,
    factory: AttendanceStrategyFactory,
    record: AttendanceRecord,
    *,
    check_out_time: datetime,
    shift: Optional[Shift],
) -> Optional[CheckOutResult]:
    """Apply checkout to an open record. Returns None if someone closed it first.

    Shared by the employee checkout and the auto-checkout sweep.
    """

    minimum_hours = (shift.minimum_hours if shift else 0) or DEFAULT_MINIMUM_HOURS
    hours = working_hours(record.check_in_time, check_out_time)
    strategy = factory.for_checkout(working_hours=hours, minimum_hours=minimum_hours, was_late=record.is_late)
    decision = strategy.decide_checkout(working_hours=hours, shift=shift)

    closed = attendance.update_checkout(
        attendance_id=record.attendance_id,
        check_out_time=check_out_time,
        working_hours=hours,
        status=decision.status,
    )
    if not closed:
        return None

    return CheckOutResult(
        attendance_id=record.attendance_id,
        shift_day=record.work_date,
        check_in_time=record.check_in_time,
        check_out_time=check_out_time,
        working_hours=hours,
        status=decision.status,
    )


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        leaves: LeaveRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        enforce_check_in_window: bool = False,
    ):
        self._attendance = attendance
        self._employees = employees
        self._shifts = shifts
        self._leaves = leaves
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._enforce_check_in_window = bool(enforce_check_in_window)

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _get_assigned_shift(self, employee: Employee, message: str) -> Shift:
        shift = self._shifts.get_by_id(employee.shift_id) if employee.shift_id else None
        if not shift:
            raise PolicyRejection(message)
        return shift

    def check_in(self, employee_id: int, *, now: datetime | None = None) -> CheckInResult:
        now = now or now_local()
        employee = self._get_employee(employee_id)
        shift = self._get_assigned_shift(employee, "No shift assigned. Please contact HR.")
        shift_day = resolve_shift_day(now, shift)

        leave = self._leaves.find_approved_covering(employee_id=employee.employee_id, day=shift_day)
        if leave:
            raise PolicyRejection(
                "You are on approved leave for this date",
                details={"type": leave.leave_type, "from": leave.from_date, "to": leave.end_date},
            )

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, shift_day)
        if existing and existing.check_in_time:
            raise self._already_checked_in(existing, shift_day)

        if self._enforce_check_in_window:
            validation = validate_check_in(now, shift, shift_day)
            if not validation.valid:
                raise PolicyRejection(validation.reason)

        strategy = self._factory.for_checkin(now=now, shift=shift, shift_day=shift_day)
        decision = strategy.decide_checkin(now=now, shift=shift, shift_day=shift_day)

        created = self._attendance.upsert_checkin(
            employee_id=employee.employee_id,
            work_date=shift_day,
            shift_id=shift.shift_id,
            check_in_time=now,
            status=decision.status,
            is_late=decision.is_late,
            late_by_minutes=decision.late_by_minutes,
        )
        if not created:
            current = self._attendance.get_for_employee_and_date(employee.employee_id, shift_day)
            raise self._already_checked_in(current, shift_day)

        logger.info(
            "Employee %s checked in for %s (%s, late=%s)",
            employee.employee_code,
            shift_day,
            decision.status.value,
            decision.late_by_minutes,
        )
        return CheckInResult(
            employee_id=employee.employee_id,
            shift_day=shift_day,
            check_in_time=now,
            status=decision.status,
            is_late=decision.is_late,
            late_by_minutes=decision.late_by_minutes,
            message=decision.note or "Checked in successfully",
            shift_name=shift.display_name,
        )

    @staticmethod
    def _already_checked_in(record: Optional[AttendanceRecord], shift_day: date) -> PolicyRejection:
        return PolicyRejection(
            "Already checked in for this shift",
            details={"check_in_time": record.check_in_time if record else None, "shift_date": shift_day},
        )

    def check_out(self, employee_id: int, *, now: datetime | None = None) -> CheckOutResult:
        now = now or now_local()
        employee = self._get_employee(employee_id)
        shift = self._get_assigned_shift(employee, "No shift assigned")
        shift_day = resolve_shift_day(now, shift)

        record = self._attendance.get_for_employee_and_date(employee.employee_id, shift_day)
        if not record or not record.check_in_time:
            raise PolicyRejection(
                "No check-in found for this shift. Please check in first.",
                details={"shift_date": shift_day},
            )
        if record.check_out_time:
            raise PolicyRejection("Already checked out today", details={"check_out_time": record.check_out_time})

        result = close_open_record(self._attendance, self._factory, record, check_out_time=now, shift=shift)
        if result is None:
            raise PolicyRejection("Already checked out today")

        logger.info(
            "Employee %s checked out for %s after %.2f hours (%s)",
            employee.employee_code,
            shift_day,
            result.working_hours,
            result.status.value,
        )
        return result

    def mark_manual(self, update: ManualAttendanceUpdate, *, marked_by: Optional[int] = None) -> AttendanceRecord:
        """Administrator override; bypasses lateness and checkout-status rules."""

        if update.check_in_time and update.check_out_time and update.check_out_time < update.check_in_time:
            raise ValidationError("Check-out cannot be earlier than check-in")
        if update.working_hours is not None and update.working_hours < 0:
            raise ValidationError("Working hours cannot be negative")

        employee = self._get_employee(update.employee_id)
        shift = self._get_assigned_shift(employee, "Employee has no shift assigned")

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, update.work_date)
        if existing:
            self._attendance.admin_update_record(
                attendance_id=existing.attendance_id,
                status=update.status,
                remarks=update.remarks,
                check_in_time=update.check_in_time or existing.check_in_time,
                check_out_time=update.check_out_time or existing.check_out_time,
                working_hours=existing.working_hours if update.working_hours is None else update.working_hours,
                marked_by=marked_by,
            )
        else:
            self._attendance.create_manual(
                employee_id=employee.employee_id,
                work_date=update.work_date,
                shift_id=shift.shift_id,
                status=update.status,
                remarks=update.remarks,
                check_in_time=update.check_in_time,
                check_out_time=update.check_out_time,
                working_hours=update.working_hours or 0,
                is_late=update.status == AttendanceStatus.LATE,
                marked_by=marked_by,
            )

        logger.info(
            "Attendance for employee %s on %s manually marked %s by %s",
            employee.employee_code,
            update.work_date,
            update.status.value,
            marked_by,
        )
        return self._attendance.get_for_employee_and_date(employee.employee_id, update.work_date)

    def get_today(self, employee_id: int, *, now: datetime | None = None) -> TodayAttendance:
        now = now or now_local()
        employee = self._get_employee(employee_id)
        shift = self._shifts.get_by_id(employee.shift_id) if employee.shift_id else None
        if not shift:
            return TodayAttendance(
                has_checked_in=False,
                has_checked_out=False,
                status=AttendanceStatus.ABSENT.value,
                message="No shift assigned",
            )

        shift_day = resolve_shift_day(now, shift)
        shift_info = dict(
            shift_day=shift_day,
            shift_name=shift.display_name,
            shift_start=shift.start_label,
            shift_end=shift.end_label,
            is_cross_midnight=shift.is_cross_midnight,
        )

        record = self._attendance.get_for_employee_and_date(employee.employee_id, shift_day)
        if not record:
            return TodayAttendance(
                has_checked_in=False,
                has_checked_out=False,
                status=AttendanceStatus.ABSENT.value,
                message="Not checked in yet",
                **shift_info,
            )

        hours = record.working_hours or 0
        if record.is_open:
            # Live figure for display only; never persisted.
            hours = working_hours(record.check_in_time, now, rounded=False)

        return TodayAttendance(
            has_checked_in=record.check_in_time is not None,
            has_checked_out=record.check_out_time is not None,
            status=record.status.value,
            working_hours=hours,
            check_in_time=record.check_in_time,
            check_out_time=record.check_out_time,
            is_late=record.is_late,
            late_by_minutes=record.late_by_minutes,
            **shift_info,
        )

    def get_history(
        self,
        employee_id: int,
        *,
        year: int,
        month: int,
        page: int = 1,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> AttendanceHistory:
        if not 1 <= int(month) <= 12:
            raise ValidationError("month must be between 1 and 12")
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        employee = self._get_employee(employee_id)
        start, end = month_bounds(int(year), int(month))
        records = list(
            self._attendance.list_for_employee_range(employee_id=employee.employee_id, start_date=start, end_date=end)
        )

        offset = (page - 1) * limit
        return AttendanceHistory(
            year=int(year),
            month=int(month),
            records=records[offset : offset + limit],
            statistics=status_counts(records),
            current_page=page,
            total_pages=math.ceil(len(records) / limit),
            total_count=len(records),
        )
