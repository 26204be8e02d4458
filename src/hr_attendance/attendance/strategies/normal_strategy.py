from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in; full-day checkout."""

    def decide_checkin(self, *, now: datetime, shift: Shift, shift_day: date) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note="Checked in successfully")

    def decide_checkout(self, *, working_hours: float, shift: Optional[Shift]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
