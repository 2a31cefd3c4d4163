from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee as seen by the attendance log.

    Note: Plain data object (no DB access code).
    """

    employee_id: int
    full_name: str
    badge_number: Optional[str] = None
    dept_id: Optional[int] = None
    is_active: bool = True
