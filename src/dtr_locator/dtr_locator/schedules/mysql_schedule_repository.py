from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.mysql_base import MySQLRepositoryBase, fetchall, fetchone, translate_errors
from .model import Schedule, ShiftAssignment
from .repository import ScheduleRepository


class MySQLScheduleRepository(MySQLRepositoryBase, ScheduleRepository):
    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        with translate_errors("load schedule"), self._cursor() as cur:
            cur.execute(
                """
                SELECT schedule_id, employee_id, work_date, shift_id, note
                FROM schedules
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Schedule(
                schedule_id=int(r["schedule_id"]),
                employee_id=int(r["employee_id"]),
                work_date=r["work_date"],
                shift_id=int(r["shift_id"]),
                note=r.get("note"),
            )

    def list_active_assignments(self, *, employee_id: int) -> Sequence[ShiftAssignment]:
        with translate_errors("load shift assignments"), self._cursor() as cur:
            cur.execute(
                """
                SELECT assignment_id, employee_id, shift_id, is_active
                FROM employee_shifts
                WHERE employee_id=%s AND is_active=1
                ORDER BY created_at
                """,
                (int(employee_id),),
            )
            return [
                ShiftAssignment(
                    assignment_id=str(r["assignment_id"]),
                    employee_id=int(r["employee_id"]),
                    shift_id=int(r["shift_id"]),
                    is_active=bool(r["is_active"]),
                )
                for r in fetchall(cur)
            ]
