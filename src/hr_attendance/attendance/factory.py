from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core.enums import AttendanceStatus
from ..shifts.model import Shift
from .shift_rules import late_status, resolve_checkout_status
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, shift: Shift, shift_day: date) -> AttendanceStrategy:
        if late_status(now, shift, shift_day).is_late:
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, working_hours: float, minimum_hours: float, was_late: bool) -> AttendanceStrategy:
        status = resolve_checkout_status(working_hours, minimum_hours, was_late)
        if status == AttendanceStatus.HALF_DAY:
            return HalfDayStrategy()
        if status == AttendanceStatus.LATE:
            return LateStrategy()
        return NormalStrategy()
