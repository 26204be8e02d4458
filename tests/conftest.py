from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Iterable, Optional, Sequence

import pytest

from hr_attendance.attendance.model import AttendanceRecord
from hr_attendance.core.enums import AttendanceStatus, LeaveStatus, LeaveType, ShiftCategory
from hr_attendance.core.exceptions import DuplicateRecordError
from hr_attendance.employees.model import Employee
from hr_attendance.leaves.model import LeaveRequest
from hr_attendance.shifts.model import NewShift, Shift


class InMemoryAttendance:
    """Attendance store keyed by (employee_id, work_date), like the unique key in MySQL."""

    def __init__(self):
        self.rows: dict[tuple[int, date], AttendanceRecord] = {}
        self._id = 0
        self.failing_checkout_ids: set[int] = set()

    def _next_id(self) -> int:
        self._id += 1
        return self._id

    def _by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        for rec in self.rows.values():
            if rec.attendance_id == attendance_id:
                return rec
        return None

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self._id = max(self._id, record.attendance_id)
        self.rows[(record.employee_id, record.work_date)] = record
        return record

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self.rows.get((employee_id, work_date))

    def upsert_checkin(self, *, employee_id, work_date, shift_id, check_in_time, status, is_late, late_by_minutes) -> bool:
        existing = self.rows.get((employee_id, work_date))
        if existing and existing.check_in_time is not None:
            return False

        fields = dict(
            shift_id=shift_id,
            check_in_time=check_in_time,
            status=status,
            is_late=is_late,
            late_by_minutes=late_by_minutes,
            is_manual_entry=False,
        )
        if existing:
            self.rows[(employee_id, work_date)] = replace(existing, **fields)
        else:
            self.rows[(employee_id, work_date)] = AttendanceRecord(
                attendance_id=self._next_id(), employee_id=employee_id, work_date=work_date, **fields
            )
        return True

    def update_checkout(self, *, attendance_id, check_out_time, working_hours, status) -> bool:
        if attendance_id in self.failing_checkout_ids:
            raise RuntimeError("connection lost")
        rec = self._by_id(attendance_id)
        if rec is None or rec.check_out_time is not None:
            return False
        self.rows[(rec.employee_id, rec.work_date)] = replace(
            rec, check_out_time=check_out_time, working_hours=working_hours, status=status
        )
        return True

    def create_manual(
        self,
        *,
        employee_id,
        work_date,
        shift_id,
        status,
        remarks,
        check_in_time,
        check_out_time,
        working_hours,
        is_late,
        marked_by,
    ) -> int:
        if (employee_id, work_date) in self.rows:
            raise DuplicateRecordError("Duplicate entry for key 'uq_attendance_employee_day'")
        rec = AttendanceRecord(
            attendance_id=self._next_id(),
            employee_id=employee_id,
            work_date=work_date,
            shift_id=shift_id,
            status=status,
            remarks=remarks,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            working_hours=working_hours,
            is_late=is_late,
            is_manual_entry=True,
            marked_by=marked_by,
        )
        self.rows[(employee_id, work_date)] = rec
        return rec.attendance_id

    def admin_update_record(
        self, *, attendance_id, status, remarks, check_in_time, check_out_time, working_hours, marked_by
    ) -> bool:
        rec = self._by_id(attendance_id)
        if rec is None:
            return False
        self.rows[(rec.employee_id, rec.work_date)] = replace(
            rec,
            status=status,
            remarks=remarks,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            working_hours=working_hours,
            is_manual_entry=True,
            marked_by=marked_by,
        )
        return True

    def upsert_leave_day(self, *, employee_id, work_date, status, leave_id, remarks) -> None:
        existing = self.rows.get((employee_id, work_date))
        if existing:
            if not existing.is_manual_entry:
                self.rows[(employee_id, work_date)] = replace(existing, status=status, leave_id=leave_id, remarks=remarks)
            return
        self.rows[(employee_id, work_date)] = AttendanceRecord(
            attendance_id=self._next_id(),
            employee_id=employee_id,
            work_date=work_date,
            status=status,
            leave_id=leave_id,
            is_manual_entry=False,
            remarks=remarks,
        )

    def delete_leave_days(self, *, employee_id, start_date, end_date, statuses: Iterable[AttendanceStatus]) -> int:
        wanted = set(statuses)
        doomed = [
            key
            for key, rec in self.rows.items()
            if rec.employee_id == employee_id
            and start_date <= rec.work_date <= end_date
            and rec.status in wanted
            and not rec.is_manual_entry
            and rec.check_in_time is None
        ]
        for key in doomed:
            del self.rows[key]
        return len(doomed)

    def list_open_checked_in_before(self, cutoff: datetime) -> Sequence[AttendanceRecord]:
        items = [r for r in self.rows.values() if r.is_open and r.check_in_time <= cutoff]
        return sorted(items, key=lambda r: r.check_in_time)

    def list_for_employee_range(self, *, employee_id, start_date, end_date) -> Sequence[AttendanceRecord]:
        items = [
            r for r in self.rows.values() if r.employee_id == employee_id and start_date <= r.work_date <= end_date
        ]
        return sorted(items, key=lambda r: r.work_date, reverse=True)

    def list_range(self, *, start_date, end_date, employee_ids=None) -> Sequence[AttendanceRecord]:
        items = [r for r in self.rows.values() if start_date <= r.work_date <= end_date]
        if employee_ids is not None:
            items = [r for r in items if r.employee_id in set(employee_ids)]
        return sorted(items, key=lambda r: (r.work_date, r.employee_id), reverse=True)


class InMemoryEmployees:
    def __init__(self, employees: Iterable[Employee] = ()):
        self.by_id = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> Employee:
        self.by_id[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)

    def list_filtered(self, *, department_id=None, shift_id=None) -> Sequence[Employee]:
        items = [e for e in self.by_id.values() if e.is_active]
        if department_id is not None:
            items = [e for e in items if e.department_id == department_id]
        if shift_id is not None:
            items = [e for e in items if e.shift_id == shift_id]
        return sorted(items, key=lambda e: e.employee_id)

    def count_by_shift(self, shift_id: int) -> int:
        return sum(1 for e in self.by_id.values() if e.shift_id == shift_id)


class InMemoryShifts:
    def __init__(self, shifts: Iterable[Shift] = ()):
        self.by_id = {s.shift_id: s for s in shifts}

    def add(self, shift: Shift) -> Shift:
        self.by_id[shift.shift_id] = shift
        return shift

    def list_all(self) -> Sequence[Shift]:
        return sorted(self.by_id.values(), key=lambda s: s.start_time)

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self.by_id.get(shift_id)

    def get_by_display_name(self, display_name: str) -> Optional[Shift]:
        for s in self.by_id.values():
            if s.display_name == display_name:
                return s
        return None

    def create(self, shift: NewShift) -> int:
        shift_id = max(self.by_id, default=0) + 1
        self.by_id[shift_id] = Shift(
            shift_id=shift_id,
            name=shift.name,
            display_name=shift.display_name,
            start_time=shift.start_time,
            end_time=shift.end_time,
            is_cross_midnight=shift.is_cross_midnight,
            grace_minutes=shift.grace_minutes,
            minimum_hours=shift.minimum_hours,
            description=shift.description,
            is_active=shift.is_active,
        )
        return shift_id

    def save(self, shift: Shift) -> bool:
        self.by_id[shift.shift_id] = shift
        return True

    def delete_by_id(self, shift_id: int) -> bool:
        return self.by_id.pop(shift_id, None) is not None


class InMemoryLeaves:
    def __init__(self):
        self.by_id: dict[int, LeaveRequest] = {}

    def add(self, leave: LeaveRequest) -> LeaveRequest:
        self.by_id[leave.leave_id] = leave
        return leave

    def create(
        self, *, employee_id, leave_type, from_date, end_date, reason, total_days, is_half_day, half_day_period
    ) -> int:
        leave_id = max(self.by_id, default=0) + 1
        self.by_id[leave_id] = LeaveRequest(
            leave_id=leave_id,
            employee_id=employee_id,
            leave_type=leave_type,
            from_date=from_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            total_days=total_days,
            is_half_day=is_half_day,
            half_day_period=half_day_period,
        )
        return leave_id

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        return self.by_id.get(leave_id)

    def find_approved_covering(self, *, employee_id, day) -> Optional[LeaveRequest]:
        for leave in self.by_id.values():
            if leave.employee_id == employee_id and leave.status == LeaveStatus.APPROVED and leave.covers(day):
                return leave
        return None

    def list_for_employee(self, *, employee_id, statuses, from_start, from_end, leave_type=None):
        wanted = set(statuses)
        return [
            l
            for l in self.by_id.values()
            if l.employee_id == employee_id
            and l.status in wanted
            and from_start <= l.from_date <= from_end
            and (leave_type is None or l.leave_type == leave_type)
        ]

    def list_overlapping(self, *, employee_id, start, end, statuses):
        wanted = set(statuses)
        return [
            l
            for l in self.by_id.values()
            if l.employee_id == employee_id and l.status in wanted and l.from_date <= end and l.end_date >= start
        ]

    def decide(self, *, leave_id, status, admin_comments, reviewed_at) -> bool:
        leave = self.by_id.get(leave_id)
        if not leave:
            return False
        self.by_id[leave_id] = replace(leave, status=status, admin_comments=admin_comments, reviewed_at=reviewed_at)
        return True

    def _filtered(self, status, leave_type):
        return [
            l
            for l in sorted(self.by_id.values(), key=lambda l: l.leave_id, reverse=True)
            if (status is None or l.status == status) and (leave_type is None or l.leave_type == leave_type)
        ]

    def list_filtered(self, *, status=None, leave_type=None, offset=0, limit=10):
        return self._filtered(status, leave_type)[offset : offset + limit]

    def count_filtered(self, *, status=None, leave_type=None) -> int:
        return len(self._filtered(status, leave_type))


GENERAL_SHIFT = Shift(
    shift_id=1,
    name=ShiftCategory.GENERAL,
    display_name="General 09-18",
    start_time=time(9, 0),
    end_time=time(18, 0),
    grace_minutes=15,
    minimum_hours=8,
)

NIGHT_SHIFT = Shift(
    shift_id=2,
    name=ShiftCategory.NIGHT,
    display_name="Night 22-06",
    start_time=time(22, 0),
    end_time=time(6, 0),
    is_cross_midnight=True,
    grace_minutes=15,
    minimum_hours=8,
)


def make_employee(employee_id: int = 1, *, shift_id: Optional[int] = 1, doj: Optional[date] = date(2024, 3, 10), **kw):
    return Employee(
        employee_id=employee_id,
        employee_code=kw.pop("employee_code", f"EMP{employee_id:03d}"),
        full_name=kw.pop("full_name", f"Employee {employee_id}"),
        shift_id=shift_id,
        doj=doj,
        **kw,
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def shifts_repo() -> InMemoryShifts:
    return InMemoryShifts([GENERAL_SHIFT, NIGHT_SHIFT])


@pytest.fixture
def employees_repo() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            make_employee(1, shift_id=1, department_id=10, department_name="Engineering"),
            make_employee(2, shift_id=2, department_id=10, department_name="Engineering"),
            make_employee(3, shift_id=None, department_id=20, department_name="Sales"),
        ]
    )


@pytest.fixture
def leaves_repo() -> InMemoryLeaves:
    return InMemoryLeaves()


@pytest.fixture
def casual_leave():
    def _make(leave_id=1, *, employee_id=1, from_date, end_date, status=LeaveStatus.PENDING, is_half_day=False, **kw):
        days = 0.5 if is_half_day else float((end_date - from_date).days + 1)
        return LeaveRequest(
            leave_id=leave_id,
            employee_id=employee_id,
            leave_type=kw.pop("leave_type", LeaveType.CASUAL),
            from_date=from_date,
            end_date=end_date,
            reason=kw.pop("reason", "family"),
            status=status,
            total_days=kw.pop("total_days", days),
            is_half_day=is_half_day,
            **kw,
        )

    return _make
