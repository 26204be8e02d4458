from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Checkout short of the shift's minimum hours. Check-in is never half-day."""

    def decide_checkin(self, *, now: datetime, shift: Shift, shift_day: date) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, working_hours: float, shift: Optional[Shift]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY, note=f"Worked {working_hours:.2f} hours")
