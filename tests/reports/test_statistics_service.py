from datetime import date, datetime

import pytest

from hr_attendance.attendance.model import AttendanceRecord
from hr_attendance.core.enums import AttendanceStatus
from hr_attendance.core.exceptions import ValidationError
from hr_attendance.reports.service import AttendanceStatisticsService

DAY = date(2024, 5, 10)


@pytest.fixture
def service(attendance_repo, employees_repo):
    attendance_repo.add(
        AttendanceRecord(
            attendance_id=1,
            employee_id=1,
            work_date=DAY,
            status=AttendanceStatus.PRESENT,
            check_in_time=datetime(2024, 5, 10, 9, 0),
            check_out_time=datetime(2024, 5, 10, 17, 30),
            working_hours=8.5,
        )
    )
    attendance_repo.add(
        AttendanceRecord(
            attendance_id=2,
            employee_id=2,
            work_date=DAY,
            status=AttendanceStatus.HALF_DAY,
            check_in_time=datetime(2024, 5, 10, 22, 0),
            check_out_time=datetime(2024, 5, 11, 2, 0),
            working_hours=4.0,
        )
    )
    return AttendanceStatisticsService(attendance_repo, employees_repo)


def test_statistics_counts_missing_employees_as_absent(service):
    stats = service.statistics(DAY, DAY)

    assert stats.total_employees == 3
    assert stats.total_present == 1
    assert stats.total_half_day == 1
    assert stats.total_absent == 1
    assert stats.average_working_hours == 6.25


def test_statistics_respects_department_filter(service):
    stats = service.statistics(DAY, DAY, department_id=20)

    assert stats.total_employees == 1
    assert stats.total_present == 0
    assert stats.total_absent == 1
    assert stats.average_working_hours == 0


def test_statistics_rejects_inverted_range(service):
    with pytest.raises(ValidationError):
        service.statistics(DAY, date(2024, 5, 1))


def test_today_details_groups_by_status(service):
    details = service.today_details(DAY)

    assert details.summary["total"] == 3
    assert details.summary["present"] == 1
    assert details.summary["half-day"] == 1
    assert details.summary["absent"] == 1
    assert details.details["absent"][0]["employee_id"] == 3
    assert details.details["absent"][0]["remarks"] == "No attendance record"


def test_daily_roster_filters_by_status_and_paginates(service):
    roster = service.daily_roster(DAY, page=1, limit=2)
    assert roster.total_count == 3
    assert roster.total_pages == 2
    assert [r["employee_id"] for r in roster.rows] == [1, 2]

    absent = service.daily_roster(DAY, status="absent")
    assert [r["employee_id"] for r in absent.rows] == [3]
