"""Auto-checkout of forgotten open attendance rows.

A row is "forgotten" when it was checked in more than ``threshold_hours`` ago
and never checked out. Closing it uses the same status rules as an employee
checkout, with the sweep time as the checkout time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import AUTO_CHECKOUT_HOURS, AUTO_CHECKOUT_INTERVAL_SECONDS
from ..shifts.repository import ShiftRepository
from .factory import AttendanceStrategyFactory
from .repository import AttendanceRepository
from .service import close_open_record

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    checked_out: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


def auto_checkout_open_records(
    attendance: AttendanceRepository,
    shifts: ShiftRepository,
    *,
    now: datetime | None = None,
    threshold_hours: float = AUTO_CHECKOUT_HOURS,
    strategy_factory: AttendanceStrategyFactory | None = None,
) -> SweepReport:
    now = now or now_local()
    factory = strategy_factory or AttendanceStrategyFactory()
    cutoff = now - timedelta(hours=threshold_hours)

    open_records = attendance.list_open_checked_in_before(cutoff)
    logger.info("Auto-checkout: %d open record(s) checked in before %s", len(open_records), cutoff)

    report = SweepReport()
    for record in open_records:
        try:
            shift = shifts.get_by_id(record.shift_id) if record.shift_id else None
            result = close_open_record(attendance, factory, record, check_out_time=now, shift=shift)
            if result is None:
                logger.info("Auto-checkout: record %s already closed, skipping", record.attendance_id)
                continue
            report.checked_out.append(record.attendance_id)
            logger.info(
                "Auto-checkout: employee %s on %s closed after %.2f hours (%s)",
                record.employee_id,
                record.work_date,
                result.working_hours,
                result.status.value,
            )
        except Exception:
            report.failed.append(record.attendance_id)
            logger.exception("Auto-checkout failed for attendance record %s", record.attendance_id)

    logger.info("Auto-checkout finished: %d closed, %d failed", len(report.checked_out), len(report.failed))
    return report


class AutoCheckoutScheduler:
    """Runs ``sweep`` every ``interval_seconds`` on a daemon thread."""

    def __init__(self, sweep: Callable[[], SweepReport], *, interval_seconds: float = AUTO_CHECKOUT_INTERVAL_SECONDS):
        self._sweep = sweep
        self._interval = float(interval_seconds)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> Optional[SweepReport]:
        try:
            return self._sweep()
        except Exception:
            # One failed firing must not stop the schedule.
            logger.exception("Auto-checkout sweep failed")
            return None

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="auto-checkout", daemon=True)
        self._thread.start()
        logger.info("Auto-checkout scheduler started (every %.0f seconds)", self._interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Auto-checkout scheduler stopped")
