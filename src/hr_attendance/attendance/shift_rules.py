"""Shift-day, shift-window, lateness and checkout-status rules.

Pure functions over a resolved ``Shift`` and naive facility-local datetimes.
Nothing here touches storage; callers persist the decisions.

Two different day keys exist on purpose:

* ``resolve_shift_day`` files check-in/out events under the day the shift began
  (an overnight shift's early-morning tail belongs to the previous date);
* ``leave_attendance_day`` files leave-generated rows under the literal
  calendar date of the leave.

For employees on cross-midnight shifts the two can disagree on the boundary day.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from ..core.constants import CHECK_IN_EARLY_TOLERANCE_HOURS, CROSS_MIDNIGHT_SPLIT_HOUR
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..shifts.model import Shift

_CLOCK_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class ShiftWindow:
    start: datetime
    end: datetime
    grace_end: datetime
    check_in_window_start: datetime
    expected_duration_hours: float


@dataclass(frozen=True)
class LateStatus:
    is_late: bool
    late_by_minutes: int


@dataclass(frozen=True)
class CheckInValidation:
    valid: bool
    reason: Optional[str] = None


def parse_clock(value: str) -> time:
    """Parse a wall-clock ``HH:MM`` string (00-23 / 00-59)."""
    match = _CLOCK_RE.match((value or "").strip())
    if not match:
        raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def resolve_shift_day(timestamp: datetime, shift: Shift) -> date:
    shift_day = timestamp.date()
    if shift.is_cross_midnight and timestamp.hour < CROSS_MIDNIGHT_SPLIT_HOUR:
        shift_day -= timedelta(days=1)
    return shift_day


def leave_attendance_day(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def shift_window(shift_day: date, shift: Shift) -> ShiftWindow:
    start = datetime.combine(shift_day, shift.start_time)
    end = datetime.combine(shift_day, shift.end_time)
    if shift.is_cross_midnight:
        end += timedelta(days=1)

    return ShiftWindow(
        start=start,
        end=end,
        grace_end=start + timedelta(minutes=shift.grace_minutes),
        check_in_window_start=start - timedelta(hours=CHECK_IN_EARLY_TOLERANCE_HOURS),
        expected_duration_hours=(end - start).total_seconds() / 3600,
    )


def late_status(check_in_time: datetime, shift: Shift, shift_day: date) -> LateStatus:
    """Lateness is measured from shift start; grace is a tolerance, not a deduction."""
    window = shift_window(shift_day, shift)
    if check_in_time <= window.grace_end:
        return LateStatus(is_late=False, late_by_minutes=0)

    late_by_minutes = int((check_in_time - window.start).total_seconds() // 60)
    return LateStatus(is_late=True, late_by_minutes=late_by_minutes)


def validate_check_in(check_in_time: datetime, shift: Shift, shift_day: date) -> CheckInValidation:
    window = shift_window(shift_day, shift)
    if check_in_time < window.check_in_window_start:
        return CheckInValidation(valid=False, reason=f"Check-in too early. Shift starts at {shift.start_label}")
    if check_in_time > window.end:
        return CheckInValidation(valid=False, reason=f"Check-in too late. Shift ended at {shift.end_label}")
    return CheckInValidation(valid=True)


def working_hours(check_in: datetime, check_out: datetime, *, rounded: bool = True) -> float:
    hours = (check_out - check_in).total_seconds() / 3600
    return round(hours, 2) if rounded else hours


def resolve_checkout_status(working_hours: float, minimum_hours: float, was_late: bool) -> AttendanceStatus:
    # Anything short of minimum_hours is a half day, including exactly the threshold.
    half_day_threshold = minimum_hours / 2

    if working_hours < half_day_threshold:
        return AttendanceStatus.HALF_DAY
    if working_hours >= minimum_hours:
        return AttendanceStatus.LATE if was_late else AttendanceStatus.PRESENT
    return AttendanceStatus.HALF_DAY
