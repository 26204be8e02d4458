from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import ShiftCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import NewShift, Shift
from .repository import ShiftRepository

_COLUMNS = """
    shift_id, name, display_name, start_time, end_time, is_cross_midnight,
    grace_minutes, minimum_hours, description, is_active
"""


def _to_shift(r: dict[str, Any]) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        name=ShiftCategory(r["name"]),
        display_name=r["display_name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        is_cross_midnight=bool(r.get("is_cross_midnight")),
        grace_minutes=int(r.get("grace_minutes") or 0),
        minimum_hours=float(r.get("minimum_hours") or 0),
        description=r.get("description"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts ORDER BY start_time, shift_id")
            return [_to_shift(r) for r in fetchall(cur)]

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def get_by_display_name(self, display_name: str) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE display_name=%s", (display_name,))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def create(self, shift: NewShift) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(name, display_name, start_time, end_time, is_cross_midnight,
                                   grace_minutes, minimum_hours, description, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    shift.name.value,
                    shift.display_name,
                    shift.start_time,
                    shift.end_time,
                    int(shift.is_cross_midnight),
                    shift.grace_minutes,
                    shift.minimum_hours,
                    shift.description,
                    int(shift.is_active),
                ),
            )
            return int(cur.lastrowid)

    def save(self, shift: Shift) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts
                SET name=%s, display_name=%s, start_time=%s, end_time=%s, is_cross_midnight=%s,
                    grace_minutes=%s, minimum_hours=%s, description=%s, is_active=%s
                WHERE shift_id=%s
                """,
                (
                    shift.name.value,
                    shift.display_name,
                    shift.start_time,
                    shift.end_time,
                    int(shift.is_cross_midnight),
                    shift.grace_minutes,
                    shift.minimum_hours,
                    shift.description,
                    int(shift.is_active),
                    shift.shift_id,
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shifts WHERE shift_id=%s", (int(shift_id),))
            return cur.rowcount > 0
