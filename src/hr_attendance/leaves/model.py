from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import HalfDayPeriod, LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    employee_id: int
    leave_type: LeaveType
    from_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    total_days: float
    is_half_day: bool = False
    half_day_period: Optional[HalfDayPeriod] = None
    applied_at: Optional[datetime] = None
    admin_comments: str = ""
    reviewed_at: Optional[datetime] = None

    def covers(self, day: date) -> bool:
        return self.from_date <= day <= self.end_date


@dataclass(frozen=True)
class LeaveApplication:
    """What an employee submits; validated by ``LeaveService.apply``."""

    leave_type: str
    from_date: date
    end_date: date
    reason: str
    is_half_day: bool = False
    half_day_period: Optional[str] = None


@dataclass(frozen=True)
class LeaveBalance:
    leave_type: LeaveType
    available: float
    used: float
    remaining: float
    monthly_allocation: int


@dataclass(frozen=True)
class MonthlyLeaveBreakdown:
    month: str
    month_number: int
    allocated: dict
    taken: dict
