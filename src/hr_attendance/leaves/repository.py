from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import HalfDayPeriod, LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        from_date: date,
        end_date: date,
        reason: str,
        total_days: float,
        is_half_day: bool,
        half_day_period: Optional[HalfDayPeriod],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_approved_covering(self, *, employee_id: int, day: date) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_for_employee(
        self,
        *,
        employee_id: int,
        statuses: Iterable[LeaveStatus],
        from_start: date,
        from_end: date,
        leave_type: Optional[LeaveType] = None,
    ) -> Sequence[LeaveRequest]:
        """Leaves whose ``from_date`` falls in [from_start, from_end]."""

        raise NotImplementedError

    def list_overlapping(
        self,
        *,
        employee_id: int,
        start: date,
        end: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        admin_comments: str,
        reviewed_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def count_filtered(self, *, status: Optional[LeaveStatus] = None, leave_type: Optional[LeaveType] = None) -> int:
        raise NotImplementedError
