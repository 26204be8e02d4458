from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import HalfDayPeriod, LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    leave_id, employee_id, leave_type, from_date, end_date, is_half_day, half_day_period,
    reason, status, total_days, applied_at, admin_comments, reviewed_at
"""


def _to_leave(r: dict[str, Any]) -> LeaveRequest:
    period = r.get("half_day_period")
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        from_date=r["from_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        total_days=float(r["total_days"]),
        is_half_day=bool(r.get("is_half_day")),
        half_day_period=HalfDayPeriod(period) if period else None,
        applied_at=r.get("applied_at"),
        admin_comments=r.get("admin_comments") or "",
        reviewed_at=r.get("reviewed_at"),
    )


def _filters(status: Optional[LeaveStatus], leave_type: Optional[LeaveType]) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []
    if status is not None:
        clauses.append("status=%s")
        params.append(status.value)
    if leave_type is not None:
        clauses.append("leave_type=%s")
        params.append(leave_type.value)
    return " AND ".join(clauses), params


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        from_date: date,
        end_date: date,
        reason: str,
        total_days: float,
        is_half_day: bool,
        half_day_period: Optional[HalfDayPeriod],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(employee_id, leave_type, from_date, end_date, reason, total_days,
                                           is_half_day, half_day_period, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,'pending')
                """,
                (
                    int(employee_id),
                    leave_type.value,
                    from_date,
                    end_date,
                    reason,
                    total_days,
                    int(is_half_day),
                    half_day_period.value if half_day_period else None,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def find_approved_covering(self, *, employee_id: int, day: date) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_requests
                WHERE employee_id=%s AND status='approved' AND from_date <= %s AND end_date >= %s
                ORDER BY from_date
                LIMIT 1
                """,
                (int(employee_id), day, day),
            )
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_for_employee(
        self,
        *,
        employee_id: int,
        statuses: Iterable[LeaveStatus],
        from_start: date,
        from_end: date,
        leave_type: Optional[LeaveType] = None,
    ) -> Sequence[LeaveRequest]:
        values = [s.value for s in statuses]
        clauses = ["employee_id=%s", f"status IN ({in_clause(values)})", "from_date BETWEEN %s AND %s"]
        params: list[object] = [int(employee_id), *values, from_start, from_end]
        if leave_type is not None:
            clauses.append("leave_type=%s")
            params.append(leave_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE {' AND '.join(clauses)} ORDER BY from_date",
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_overlapping(
        self,
        *,
        employee_id: int,
        start: date,
        end: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveRequest]:
        values = [s.value for s in statuses]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_requests
                WHERE employee_id=%s AND status IN ({in_clause(values)})
                  AND from_date <= %s AND end_date >= %s
                ORDER BY from_date
                """,
                (int(employee_id), *values, end, start),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        admin_comments: str,
        reviewed_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, admin_comments=%s, reviewed_at=%s
                WHERE leave_id=%s
                """,
                (status.value, admin_comments, reviewed_at, int(leave_id)),
            )
            return cur.rowcount > 0

    def list_filtered(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[LeaveRequest]:
        where, params = _filters(status, leave_type)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE {where} ORDER BY applied_at DESC LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def count_filtered(self, *, status: Optional[LeaveStatus] = None, leave_type: Optional[LeaveType] = None) -> int:
        where, params = _filters(status, leave_type)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM leave_requests WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
