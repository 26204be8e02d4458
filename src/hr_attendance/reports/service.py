from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository


@dataclass(frozen=True)
class AttendanceStatistics:
    start: date
    end: date
    total_employees: int
    total_present: int
    total_absent: int
    total_half_day: int
    total_leave: int
    total_late: int
    average_working_hours: float


@dataclass(frozen=True)
class DayDetails:
    day: date
    summary: dict
    details: dict


@dataclass(frozen=True)
class DailyRoster:
    day: date
    rows: list[dict]
    current_page: int
    total_pages: int
    total_count: int


def _employee_row(employee: Employee, record: Optional[AttendanceRecord]) -> dict:
    row = {
        "employee_id": employee.employee_id,
        "employee_code": employee.employee_code,
        "name": employee.full_name,
        "department": employee.department_name or "-",
    }
    if record is None:
        row.update(status=AttendanceStatus.ABSENT.value, working_hours=0, remarks="No attendance record")
        return row

    row.update(
        status=record.status.value,
        check_in=record.check_in_time,
        check_out=record.check_out_time,
        working_hours=record.working_hours or 0,
        is_late=record.is_late,
        late_by_minutes=record.late_by_minutes,
        remarks=record.remarks or "",
    )
    return row


class AttendanceStatisticsService:
    """Admin-facing aggregates over attendance rows.

    Employees without a row for a day are reported as absent; no row is
    written for them.
    """

    def __init__(self, attendance: AttendanceRepository, employees: EmployeeRepository):
        self._attendance = attendance
        self._employees = employees

    def _scope(self, department_id: Optional[int], shift_id: Optional[int]) -> list[Employee]:
        return list(self._employees.list_filtered(department_id=department_id, shift_id=shift_id))

    def statistics(
        self,
        start: date,
        end: date,
        *,
        department_id: Optional[int] = None,
        shift_id: Optional[int] = None,
    ) -> AttendanceStatistics:
        if end < start:
            raise ValidationError("End date must be after or equal to start date")

        employees = self._scope(department_id, shift_id)
        employee_ids = [e.employee_id for e in employees]
        records = self._attendance.list_range(start_date=start, end_date=end, employee_ids=employee_ids) if employee_ids else []

        counts = {status: 0 for status in AttendanceStatus}
        total_hours = 0.0
        hours_count = 0
        for r in records:
            counts[r.status] += 1
            if r.working_hours and r.working_hours > 0:
                total_hours += r.working_hours
                hours_count += 1

        with_records = {r.employee_id for r in records}
        counts[AttendanceStatus.ABSENT] += sum(1 for eid in employee_ids if eid not in with_records)

        return AttendanceStatistics(
            start=start,
            end=end,
            total_employees=len(employees),
            total_present=counts[AttendanceStatus.PRESENT],
            total_absent=counts[AttendanceStatus.ABSENT],
            total_half_day=counts[AttendanceStatus.HALF_DAY],
            total_leave=counts[AttendanceStatus.LEAVE],
            total_late=counts[AttendanceStatus.LATE],
            average_working_hours=round(total_hours / hours_count, 2) if hours_count else 0,
        )

    def _rows_for_day(self, day: date, department_id: Optional[int], shift_id: Optional[int]) -> list[dict]:
        employees = self._scope(department_id, shift_id)
        employee_ids = [e.employee_id for e in employees]
        records = self._attendance.list_range(start_date=day, end_date=day, employee_ids=employee_ids) if employee_ids else []
        by_employee = {r.employee_id: r for r in records}
        return [_employee_row(e, by_employee.get(e.employee_id)) for e in employees]

    def today_details(
        self,
        day: date,
        *,
        department_id: Optional[int] = None,
        shift_id: Optional[int] = None,
    ) -> DayDetails:
        rows = self._rows_for_day(day, department_id, shift_id)

        details: dict[str, list[dict]] = {status.value: [] for status in AttendanceStatus}
        for row in rows:
            details[row["status"]].append(row)

        summary = {status: len(items) for status, items in details.items()}
        summary["total"] = len(rows)
        return DayDetails(day=day, summary=summary, details=details)

    def daily_roster(
        self,
        day: date,
        *,
        department_id: Optional[int] = None,
        shift_id: Optional[int] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> DailyRoster:
        """Every in-scope employee with their attendance for ``day``, paginated."""

        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        rows = self._rows_for_day(day, department_id, shift_id)
        if status and status != "all":
            rows = [r for r in rows if r["status"] == status]

        offset = (page - 1) * limit
        return DailyRoster(
            day=day,
            rows=rows[offset : offset + limit],
            current_page=page,
            total_pages=math.ceil(len(rows) / limit),
            total_count=len(rows),
        )
