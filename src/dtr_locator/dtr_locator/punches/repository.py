from __future__ import annotations

from typing import Optional, Protocol

from .model import AttendancePunch


class PunchRepository(Protocol):
    def find(self, *, employee_id: int, check_time: str) -> Optional[AttendancePunch]:
        """Any punch (device or synthesized) at exactly this wall-clock time."""

        raise NotImplementedError

    def insert(self, punch: AttendancePunch) -> int:
        """Insert a punch and return its id.

        Raises ConflictError when the (employee, time, synthesized) key exists.
        """

        raise NotImplementedError
