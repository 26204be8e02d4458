from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewShift, Shift


class ShiftRepository(Protocol):
    def list_all(self) -> Sequence[Shift]:
        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def get_by_display_name(self, display_name: str) -> Optional[Shift]:
        raise NotImplementedError

    def create(self, shift: NewShift) -> int:
        raise NotImplementedError

    def save(self, shift: Shift) -> bool:
        raise NotImplementedError

    def delete_by_id(self, shift_id: int) -> bool:
        raise NotImplementedError
