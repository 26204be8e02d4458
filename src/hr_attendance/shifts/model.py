from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..core.constants import DEFAULT_GRACE_MINUTES, DEFAULT_MINIMUM_HOURS
from ..core.enums import ShiftCategory


@dataclass(frozen=True)
class Shift:
    """Domain entity: a named work-schedule template.

    ``start_time``/``end_time`` are facility wall-clock times, not instants.
    """

    shift_id: int
    name: ShiftCategory
    display_name: str
    start_time: time
    end_time: time
    is_cross_midnight: bool = False
    grace_minutes: int = DEFAULT_GRACE_MINUTES
    minimum_hours: float = DEFAULT_MINIMUM_HOURS
    description: Optional[str] = None
    is_active: bool = True

    @property
    def start_label(self) -> str:
        return self.start_time.strftime("%H:%M")

    @property
    def end_label(self) -> str:
        return self.end_time.strftime("%H:%M")


@dataclass(frozen=True)
class NewShift:
    name: ShiftCategory
    display_name: str
    start_time: time
    end_time: time
    is_cross_midnight: bool
    grace_minutes: int
    minimum_hours: float
    description: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class ShiftUpdate:
    """Admin edit of a shift. ``None`` means "leave unchanged"."""

    name: Optional[str] = None
    display_name: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_cross_midnight: Optional[bool] = None
    grace_minutes: Optional[int] = None
    minimum_hours: Optional[float] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
