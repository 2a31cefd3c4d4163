from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..shifts.model import ShiftDefinition


@dataclass(frozen=True)
class Schedule:
    """Per-date shift override for one employee."""

    schedule_id: int
    employee_id: int
    work_date: date
    shift_id: int
    note: Optional[str] = None


@dataclass(frozen=True)
class ShiftAssignment:
    """Standing (default) shift assignment for one employee."""

    assignment_id: str
    employee_id: int
    shift_id: int
    is_active: bool = True


@dataclass(frozen=True)
class ShiftResolution:
    """Result of resolving the shift effective for (employee, date).

    `shift` is None when nothing resolves; `reason` says why, for operators.
    """

    shift: Optional[ShiftDefinition]
    reason: str = ""

    @property
    def resolved(self) -> bool:
        return self.shift is not None
