from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_SELECT = """
    SELECT e.employee_id, e.employee_code, e.full_name, e.email,
           e.department_id, d.name AS department_name,
           e.shift_id, e.doj, e.is_active
    FROM employees e
    LEFT JOIN departments d ON d.department_id = e.department_id
"""


def _to_employee(r: dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r["employee_code"],
        full_name=r["full_name"],
        email=r.get("email"),
        department_id=r.get("department_id"),
        department_name=r.get("department_name"),
        shift_id=r.get("shift_id"),
        doj=r.get("doj"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_filtered(
        self,
        *,
        department_id: Optional[int] = None,
        shift_id: Optional[int] = None,
    ) -> Sequence[Employee]:
        clauses = ["e.is_active=1"]
        params: list[object] = []

        if department_id is not None:
            clauses.append("e.department_id=%s")
            params.append(int(department_id))
        if shift_id is not None:
            clauses.append("e.shift_id=%s")
            params.append(int(shift_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where} ORDER BY e.employee_code", tuple(params))
            return [_to_employee(r) for r in fetchall(cur)]

    def count_by_shift(self, shift_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM employees WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
