from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        department_id: Optional[int] = None,
        shift_id: Optional[int] = None,
    ) -> Sequence[Employee]:
        raise NotImplementedError

    def count_by_shift(self, shift_id: int) -> int:
        raise NotImplementedError
