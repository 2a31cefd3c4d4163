from __future__ import annotations

import logging
from datetime import date

from ..common.datetime_utils import parse_iso_date
from ..employees.repository import EmployeeRepository
from ..shifts.repository import ShiftRepository
from .model import ShiftResolution
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ShiftResolver:
    """Resolve the single shift effective for an employee on a date.

    A per-date schedule wins over the standing assignment. Zero or several
    standing assignments resolve to nothing; no default shift is guessed.
    """

    def __init__(self, employees: EmployeeRepository, schedules: ScheduleRepository, shifts: ShiftRepository):
        self._employees = employees
        self._schedules = schedules
        self._shifts = shifts

    def resolve(self, *, employee_id: int, work_date: date | str) -> ShiftResolution:
        if isinstance(work_date, str):
            work_date = parse_iso_date(work_date)

        if self._employees.get_by_id(employee_id) is None:
            return ShiftResolution(None, f"employee {employee_id} not found")

        sc = self._schedules.get_for_employee_and_date(employee_id=employee_id, work_date=work_date)
        if sc:
            shift = self._shifts.get_by_id(sc.shift_id)
            if shift is None:
                return ShiftResolution(None, f"scheduled shift {sc.shift_id} not found")
            return ShiftResolution(shift, "schedule")

        assignments = self._schedules.list_active_assignments(employee_id=employee_id)
        shift_ids = sorted({a.shift_id for a in assignments})
        if not shift_ids:
            return ShiftResolution(None, "no shift assigned")
        if len(shift_ids) > 1:
            logger.warning("Employee %s has %d active shift assignments: %s", employee_id, len(shift_ids), shift_ids)
            return ShiftResolution(None, f"ambiguous shift assignment {shift_ids}")

        shift = self._shifts.get_by_id(shift_ids[0])
        if shift is None:
            return ShiftResolution(None, f"assigned shift {shift_ids[0]} not found")
        return ShiftResolution(shift, "assignment")
