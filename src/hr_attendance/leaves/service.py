from __future__ import annotations

import calendar
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..attendance.shift_rules import leave_attendance_day
from ..common.datetime_utils import iter_days, month_bounds, now_local
from ..common.validators import require_enum, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE, LEAVE_ATTENDANCE_REMARK, MONTHLY_LEAVE_ALLOCATION
from ..core.enums import AttendanceStatus, HalfDayPeriod, LeaveStatus, LeaveType
from ..core.exceptions import InsufficientLeaveBalance, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import LeaveApplication, LeaveBalance, LeaveRequest, MonthlyLeaveBreakdown
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

# Leaves that count against the balance.
_COUNTED_STATUSES = (LeaveStatus.APPROVED, LeaveStatus.PENDING)


@dataclass(frozen=True)
class LeaveApplied:
    leave: LeaveRequest
    balance: LeaveBalance


@dataclass(frozen=True)
class LeavePage:
    leaves: Sequence[LeaveRequest]
    current_page: int
    total_pages: int
    total_count: int

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.current_page > 1


def accrued_months(doj: date, today: date) -> int:
    """Months of allocation earned so far this year.

    Accrual restarts every January; a joining month counts in full.
    """

    if doj.year > today.year:
        return 0
    if doj.year == today.year:
        return max(0, today.month - doj.month + 1)
    return today.month


class LeaveService:
    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository, attendance: AttendanceRepository):
        self._leaves = leaves
        self._employees = employees
        self._attendance = attendance

    def _get_employee_with_doj(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        if not employee.doj:
            raise ValidationError("Employee date of joining not found. Please contact HR.")
        return employee

    def _balance_for(self, employee: Employee, leave_type: LeaveType, today: date) -> LeaveBalance:
        monthly = MONTHLY_LEAVE_ALLOCATION[leave_type]
        available = accrued_months(employee.doj, today) * monthly
        year_start, year_end = date(today.year, 1, 1), date(today.year, 12, 31)

        counted = self._leaves.list_for_employee(
            employee_id=employee.employee_id,
            statuses=_COUNTED_STATUSES,
            from_start=year_start,
            from_end=year_end,
            leave_type=leave_type,
        )
        used = sum(l.total_days for l in counted)
        return LeaveBalance(
            leave_type=leave_type,
            available=available,
            used=used,
            remaining=available - used,
            monthly_allocation=monthly,
        )

    def apply(self, employee_id: int, request: LeaveApplication, *, today: date | None = None) -> LeaveApplied:
        today = today or now_local().date()
        leave_type = require_enum(LeaveType, request.leave_type, "leave type")
        reason = require_non_empty(request.reason, "Reason")
        if not request.from_date or not request.end_date:
            raise ValidationError("From date and end date are required")

        half_day_period: Optional[HalfDayPeriod] = None
        if request.is_half_day:
            if not request.half_day_period:
                raise ValidationError("Half day period is required when selecting half day leave")
            half_day_period = require_enum(HalfDayPeriod, request.half_day_period, "half day period")
            if request.from_date != request.end_date:
                raise ValidationError("For half day leave, from date and end date must be the same")
            total_days = 0.5
        else:
            if request.end_date < request.from_date:
                raise ValidationError("End date must be after or equal to start date")
            total_days = float((request.end_date - request.from_date).days + 1)

        employee = self._get_employee_with_doj(employee_id)
        balance = self._balance_for(employee, leave_type, today)
        if total_days > balance.remaining:
            raise InsufficientLeaveBalance(
                f"Insufficient {leave_type.value} leave balance. You have {balance.remaining:g} days remaining "
                f"out of {balance.available:g} available, but requested {total_days:g} days.",
                details={"remaining": balance.remaining, "available": balance.available, "requested": total_days},
            )

        leave_id = self._leaves.create(
            employee_id=employee.employee_id,
            leave_type=leave_type,
            from_date=request.from_date,
            end_date=request.end_date,
            reason=reason,
            total_days=total_days,
            is_half_day=bool(request.is_half_day),
            half_day_period=half_day_period,
        )
        logger.info(
            "Employee %s applied for %s %s leave (%s to %s)",
            employee.employee_code,
            total_days,
            leave_type.value,
            request.from_date,
            request.end_date,
        )

        leave = self._leaves.get_by_id(leave_id)
        after = LeaveBalance(
            leave_type=leave_type,
            available=balance.available,
            used=balance.used + total_days,
            remaining=balance.remaining - total_days,
            monthly_allocation=balance.monthly_allocation,
        )
        return LeaveApplied(leave=leave, balance=after)

    def balance(self, employee_id: int, *, today: date | None = None) -> dict[LeaveType, LeaveBalance]:
        today = today or now_local().date()
        employee = self._get_employee_with_doj(employee_id)
        return {leave_type: self._balance_for(employee, leave_type, today) for leave_type in LeaveType}

    def breakdown(self, employee_id: int, *, year: int) -> list[MonthlyLeaveBreakdown]:
        employee = self._get_employee_with_doj(employee_id)
        start_month = employee.doj.month if employee.doj.year == year else 1

        months = []
        for month in range(start_month, 13):
            month_start, month_end = month_bounds(year, month)
            overlapping = self._leaves.list_overlapping(
                employee_id=employee.employee_id,
                start=month_start,
                end=month_end,
                statuses=_COUNTED_STATUSES,
            )
            taken = {t: 0.0 for t in LeaveType}
            for leave in overlapping:
                taken[leave.leave_type] += leave.total_days

            months.append(
                MonthlyLeaveBreakdown(
                    month=calendar.month_name[month],
                    month_number=month,
                    allocated=dict(MONTHLY_LEAVE_ALLOCATION),
                    taken=taken,
                )
            )
        return months

    def review(
        self,
        leave_id: int,
        status: str,
        *,
        comments: str = "",
        now: datetime | None = None,
    ) -> LeaveRequest:
        """Approve or reject a leave and reconcile the attendance it covers.

        Safe to repeat: re-approving rewrites the same rows, re-rejecting
        finds nothing left to delete.
        """

        decision = require_enum(LeaveStatus, status, "status")
        if decision == LeaveStatus.PENDING:
            raise ValidationError("Invalid status. Must be 'approved' or 'rejected'")

        leave = self._leaves.get_by_id(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")

        self._leaves.decide(
            leave_id=leave.leave_id,
            status=decision,
            admin_comments=(comments or "").strip(),
            reviewed_at=now or now_local(),
        )

        if decision == LeaveStatus.APPROVED:
            marked = self.mark_leave_attendance(leave)
            logger.info("Leave %s approved; %d attendance day(s) marked", leave.leave_id, marked)
        else:
            removed = self.remove_leave_attendance(leave)
            logger.info("Leave %s rejected; %d attendance day(s) removed", leave.leave_id, removed)

        return self._leaves.get_by_id(leave.leave_id)

    def mark_leave_attendance(self, leave: LeaveRequest) -> int:
        status = AttendanceStatus.HALF_DAY if leave.is_half_day else AttendanceStatus.LEAVE
        days = 0
        for day in iter_days(leave_attendance_day(leave.from_date), leave_attendance_day(leave.end_date)):
            self._attendance.upsert_leave_day(
                employee_id=leave.employee_id,
                work_date=day,
                status=status,
                leave_id=leave.leave_id,
                remarks=LEAVE_ATTENDANCE_REMARK,
            )
            days += 1
        return days

    def remove_leave_attendance(self, leave: LeaveRequest) -> int:
        # Manual entries and rows with a check-in are never deleted here.
        return self._attendance.delete_leave_days(
            employee_id=leave.employee_id,
            start_date=leave_attendance_day(leave.from_date),
            end_date=leave_attendance_day(leave.end_date),
            statuses=(AttendanceStatus.LEAVE, AttendanceStatus.HALF_DAY),
        )

    def list_leaves(
        self,
        *,
        status: Optional[str] = None,
        leave_type: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> LeavePage:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        status_filter = require_enum(LeaveStatus, status, "status") if status and status != "all" else None
        type_filter = require_enum(LeaveType, leave_type, "leave type") if leave_type and leave_type != "all" else None

        leaves = self._leaves.list_filtered(
            status=status_filter,
            leave_type=type_filter,
            offset=(page - 1) * limit,
            limit=limit,
        )
        total = self._leaves.count_filtered(status=status_filter, leave_type=type_filter)
        return LeavePage(
            leaves=leaves,
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_count=total,
        )
