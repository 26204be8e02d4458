from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one row per (employee, shift day).

    ``work_date`` is the shift day, not the wall-clock date of the check-in.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    status: AttendanceStatus
    shift_id: Optional[int] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    working_hours: Optional[float] = None
    is_late: bool = False
    late_by_minutes: int = 0
    leave_id: Optional[int] = None
    is_manual_entry: bool = False
    remarks: Optional[str] = None
    marked_by: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None


@dataclass(frozen=True)
class ManualAttendanceUpdate:
    """Administrator override for one (employee, date).

    Every writable field is listed; nothing else from a request body reaches storage.
    """

    employee_id: int
    work_date: date
    status: AttendanceStatus
    remarks: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    working_hours: Optional[float] = None
