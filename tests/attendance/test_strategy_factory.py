from datetime import date, datetime, time

from hr_attendance.attendance.factory import AttendanceStrategyFactory
from hr_attendance.attendance.strategies.half_day_strategy import HalfDayStrategy
from hr_attendance.attendance.strategies.late_strategy import LateStrategy
from hr_attendance.attendance.strategies.normal_strategy import NormalStrategy
from hr_attendance.core.enums import AttendanceStatus, ShiftCategory
from hr_attendance.shifts.model import Shift

SHIFT = Shift(
    shift_id=1,
    name=ShiftCategory.MORNING,
    display_name="Morning",
    start_time=time(9, 0),
    end_time=time(18, 0),
    grace_minutes=15,
)


def test_factory_checkin_on_time_within_grace():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=datetime(2025, 1, 1, 9, 14, 59), shift=SHIFT, shift_day=date(2025, 1, 1))

    assert isinstance(strategy, NormalStrategy)
    decision = strategy.decide_checkin(now=datetime(2025, 1, 1, 9, 14, 59), shift=SHIFT, shift_day=date(2025, 1, 1))
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.is_late is False


def test_factory_checkin_late_after_grace():
    now = datetime(2025, 1, 1, 9, 16)
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=now, shift=SHIFT, shift_day=date(2025, 1, 1))

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin(now=now, shift=SHIFT, shift_day=date(2025, 1, 1))
    assert decision.status == AttendanceStatus.LATE
    assert decision.late_by_minutes == 16
    assert decision.note == "Checked in late by 16 minutes"


def test_factory_checkout_picks_strategy_from_hours_and_lateness():
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_checkout(working_hours=3.5, minimum_hours=8, was_late=False), HalfDayStrategy)
    assert isinstance(factory.for_checkout(working_hours=6, minimum_hours=8, was_late=True), HalfDayStrategy)
    assert isinstance(factory.for_checkout(working_hours=8, minimum_hours=8, was_late=True), LateStrategy)
    assert isinstance(factory.for_checkout(working_hours=9, minimum_hours=8, was_late=False), NormalStrategy)


def test_half_day_checkout_note_reports_hours():
    decision = HalfDayStrategy().decide_checkout(working_hours=3.5, shift=SHIFT)
    assert decision.status == AttendanceStatus.HALF_DAY
    assert decision.note == "Worked 3.50 hours"


def test_half_day_strategy_gives_neutral_checkin_decision():
    decision = HalfDayStrategy().decide_checkin(now=datetime(2025, 1, 1, 9, 0), shift=SHIFT, shift_day=date(2025, 1, 1))
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.is_late is False
