from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Schedule, ShiftAssignment


class ScheduleRepository(Protocol):
    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        raise NotImplementedError

    def list_active_assignments(self, *, employee_id: int) -> Sequence[ShiftAssignment]:
        """Standing assignments flagged as in use for the employee."""

        raise NotImplementedError
