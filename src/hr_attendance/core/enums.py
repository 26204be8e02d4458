from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role, set on the session by the authentication layer."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Attendance status persisted per (employee, shift day)."""

    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LEAVE = "leave"
    LATE = "late"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(str, Enum):
    SICK = "sick"
    CASUAL = "casual"


class HalfDayPeriod(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"


class ShiftCategory(str, Enum):
    MORNING = "Morning"
    NIGHT = "Night"
    GENERAL = "General"
