from __future__ import annotations

from typing import Optional

from ..database.mysql_base import MySQLRepositoryBase, fetchone, translate_errors
from .model import Employee
from .repository import EmployeeRepository


class MySQLEmployeeRepository(MySQLRepositoryBase, EmployeeRepository):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with translate_errors("load employee"), self._cursor() as cur:
            cur.execute(
                """
                SELECT employee_id, full_name, badge_number, dept_id, is_active
                FROM employees
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Employee(
                employee_id=int(row["employee_id"]),
                full_name=row["full_name"],
                badge_number=row.get("badge_number"),
                dept_id=row.get("dept_id"),
                is_active=bool(row.get("is_active", True)),
            )
