from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee's work profile.

    Note: plain data object; shift and department are references, resolved by
    the persistence layer before reaching the attendance rules.
    """

    employee_id: int
    employee_code: str
    full_name: str
    email: Optional[str] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    shift_id: Optional[int] = None
    doj: Optional[date] = None
    is_active: bool = True
