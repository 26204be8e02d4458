from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..attendance.shift_rules import parse_clock
from ..common.validators import require_enum, require_int_range, require_non_empty, require_positive_number
from ..core.constants import DEFAULT_GRACE_MINUTES, DEFAULT_MINIMUM_HOURS, MAX_GRACE_MINUTES
from ..core.enums import ShiftCategory
from ..core.exceptions import NotFoundError, PolicyRejection, ValidationError
from ..employees.repository import EmployeeRepository
from .model import NewShift, Shift, ShiftUpdate
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


class ShiftService:
    """Use case: manage shift templates (admin)."""

    def __init__(self, shifts: ShiftRepository, employees: EmployeeRepository):
        self._shifts = shifts
        self._employees = employees

    def list_shifts(self) -> Sequence[Shift]:
        return self._shifts.list_all()

    def get(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def create(
        self,
        *,
        name: str,
        display_name: str,
        start_time: str,
        end_time: str,
        is_cross_midnight: Optional[bool] = None,
        grace_minutes: Optional[int] = None,
        minimum_hours: Optional[float] = None,
        description: Optional[str] = None,
    ) -> Shift:
        category = require_enum(ShiftCategory, name, "shift name")
        display_name = require_non_empty(display_name, "Display name")
        start = parse_clock(start_time)
        end = parse_clock(end_time)

        if self._shifts.get_by_display_name(display_name):
            raise ValidationError("Shift with this display name already exists")

        new_shift = NewShift(
            name=category,
            display_name=display_name,
            start_time=start,
            end_time=end,
            is_cross_midnight=end < start if is_cross_midnight is None else bool(is_cross_midnight),
            grace_minutes=require_int_range(
                DEFAULT_GRACE_MINUTES if grace_minutes is None else grace_minutes,
                "Grace minutes",
                min_value=0,
                max_value=MAX_GRACE_MINUTES,
            ),
            minimum_hours=require_positive_number(
                DEFAULT_MINIMUM_HOURS if minimum_hours is None else minimum_hours,
                "Minimum hours",
            ),
            description=description,
        )
        shift_id = self._shifts.create(new_shift)
        logger.info("Created shift %s (%s-%s)", display_name, start_time, end_time)
        return self.get(shift_id)

    def update(self, shift_id: int, update: ShiftUpdate) -> Shift:
        shift = self.get(shift_id)

        changes: dict = {}
        if update.name is not None:
            changes["name"] = require_enum(ShiftCategory, update.name, "shift name")
        if update.display_name is not None:
            display_name = require_non_empty(update.display_name, "Display name")
            other = self._shifts.get_by_display_name(display_name)
            if other and other.shift_id != shift.shift_id:
                raise ValidationError("Shift with this display name already exists")
            changes["display_name"] = display_name
        if update.start_time is not None:
            changes["start_time"] = parse_clock(update.start_time)
        if update.end_time is not None:
            changes["end_time"] = parse_clock(update.end_time)
        if update.grace_minutes is not None:
            changes["grace_minutes"] = require_int_range(
                update.grace_minutes, "Grace minutes", min_value=0, max_value=MAX_GRACE_MINUTES
            )
        if update.minimum_hours is not None:
            changes["minimum_hours"] = require_positive_number(update.minimum_hours, "Minimum hours")
        if update.description is not None:
            changes["description"] = update.description
        if update.is_active is not None:
            changes["is_active"] = bool(update.is_active)

        updated = replace(shift, **changes)
        if update.is_cross_midnight is not None:
            updated = replace(updated, is_cross_midnight=bool(update.is_cross_midnight))
        elif "start_time" in changes or "end_time" in changes:
            updated = replace(updated, is_cross_midnight=updated.end_time < updated.start_time)

        self._shifts.save(updated)
        return updated

    def delete(self, shift_id: int) -> None:
        shift = self.get(shift_id)

        assigned = self._employees.count_by_shift(shift.shift_id)
        if assigned > 0:
            raise PolicyRejection(
                f"Cannot delete shift. {assigned} employee(s) are assigned to this shift. "
                "Please reassign them first.",
                details={"assigned_employees": assigned},
            )

        if not self._shifts.delete_by_id(shift.shift_id):
            raise NotFoundError("Shift not found")
        logger.info("Deleted shift %s", shift.display_name)
