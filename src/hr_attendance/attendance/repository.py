from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store. Implementations must enforce a unique (employee_id, work_date) key."""

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        shift_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        is_late: bool,
        late_by_minutes: int,
    ) -> bool:
        """Atomically create the day's row, or fill an existing row that has no check-in.

        Returns False when the row already carries a check-in.
        """

        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        working_hours: float,
        status: AttendanceStatus,
    ) -> bool:
        """Close an open row. Returns False when it was already checked out."""

        raise NotImplementedError

    def create_manual(
        self,
        *,
        employee_id: int,
        work_date: date,
        shift_id: Optional[int],
        status: AttendanceStatus,
        remarks: Optional[str],
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        working_hours: float,
        is_late: bool,
        marked_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        remarks: Optional[str],
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        working_hours: Optional[float],
        marked_by: Optional[int],
    ) -> bool:
        """Admin-only override; flags the row as a manual entry."""

        raise NotImplementedError

    def upsert_leave_day(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        leave_id: int,
        remarks: str,
    ) -> None:
        """Mark the day as leave. A row an administrator entered keeps its own values."""

        raise NotImplementedError

    def delete_leave_days(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[AttendanceStatus],
    ) -> int:
        """Delete leave-generated rows in [start_date, end_date] with one of ``statuses``.

        Manual rows and rows carrying a check-in are kept.
        """

        raise NotImplementedError

    def list_open_checked_in_before(self, cutoff: datetime) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee_range(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
