from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, optional_float
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, shift_id, work_date, check_in_time, check_out_time, status,
    working_hours, is_late, late_by_minutes, leave_id, is_manual_entry, remarks, marked_by
"""


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        shift_id=r.get("shift_id"),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        working_hours=optional_float(r.get("working_hours")),
        is_late=bool(r.get("is_late")),
        late_by_minutes=int(r.get("late_by_minutes") or 0),
        leave_id=r.get("leave_id"),
        is_manual_entry=bool(r.get("is_manual_entry")),
        remarks=r.get("remarks"),
        marked_by=r.get("marked_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        params = (shift_id, check_in_time, status.value, int(is_late), late_by_minutes)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(employee_id, work_date, shift_id, check_in_time, status,
                                                   is_late, late_by_minutes, is_manual_entry)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    (int(employee_id), work_date, *params),
                )
                return True
        except DuplicateRecordError:
            pass

        # The day already has a row (leave, manual mark); fill it only while it has no check-in.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET shift_id=%s, check_in_time=%s, status=%s, is_late=%s, late_by_minutes=%s,
                    is_manual_entry=0
                WHERE employee_id=%s AND work_date=%s AND check_in_time IS NULL
                """,
                (*params, int(employee_id), work_date),
            )
            return cur.rowcount > 0

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        working_hours: float,
        status: AttendanceStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, working_hours=%s, status=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, working_hours, status.value, int(attendance_id)),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, shift_id, status, remarks, check_in_time,
                                               check_out_time, working_hours, is_late, late_by_minutes,
                                               is_manual_entry, marked_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,0,1,%s)
                """,
                (
                    int(employee_id),
                    work_date,
                    shift_id,
                    status.value,
                    remarks,
                    check_in_time,
                    check_out_time,
                    working_hours,
                    int(is_late),
                    marked_by,
                ),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, remarks=%s, check_in_time=%s, check_out_time=%s, working_hours=%s,
                    is_manual_entry=1, marked_by=%s
                WHERE attendance_id=%s
                """,
                (status.value, remarks, check_in_time, check_out_time, working_hours, marked_by, int(attendance_id)),
            )
            return cur.rowcount > 0

    def upsert_leave_day(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        leave_id: int,
        remarks: str,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, status, leave_id, is_manual_entry, remarks)
                VALUES(%s,%s,%s,%s,0,%s)
                ON DUPLICATE KEY UPDATE
                    status=IF(is_manual_entry, status, VALUES(status)),
                    leave_id=IF(is_manual_entry, leave_id, VALUES(leave_id)),
                    remarks=IF(is_manual_entry, remarks, VALUES(remarks))
                """,
                (int(employee_id), work_date, status.value, int(leave_id), remarks),
            )

    def delete_leave_days(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[AttendanceStatus],
    ) -> int:
        values = [s.value for s in statuses]
        if not values:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                DELETE FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                  AND status IN ({in_clause(values)}) AND is_manual_entry=0 AND check_in_time IS NULL
                """,
                (int(employee_id), start_date, end_date, *values),
            )
            return int(cur.rowcount)

    def list_open_checked_in_before(self, cutoff: datetime) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE check_out_time IS NULL AND check_in_time IS NOT NULL AND check_in_time <= %s
                ORDER BY check_in_time
                """,
                (cutoff,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_employee_range(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_ids is not None:
            if not employee_ids:
                return []
            clauses.append(f"employee_id IN ({in_clause(employee_ids)})")
            params.extend(int(i) for i in employee_ids)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY work_date DESC, employee_id",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
