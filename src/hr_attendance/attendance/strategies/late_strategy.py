from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from ..shift_rules import late_status
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in after the grace period; a full day after a late check-in stays late."""

    def decide_checkin(self, *, now: datetime, shift: Shift, shift_day: date) -> StatusDecision:
        late = late_status(now, shift, shift_day)
        return StatusDecision(
            status=AttendanceStatus.LATE,
            is_late=True,
            late_by_minutes=late.late_by_minutes,
            note=f"Checked in late by {late.late_by_minutes} minutes",
        )

    def decide_checkout(self, *, working_hours: float, shift: Optional[Shift]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, is_late=True)
