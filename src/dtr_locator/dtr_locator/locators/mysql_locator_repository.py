from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.enums import LocatorStatus, ReconciliationOutcome, ReconciliationState
from ..database.mysql_base import MySQLRepositoryBase, fetchall, fetchone, translate_errors
from .model import AuthorizationRecord, LocatorFilter
from .repository import LocatorRepository, SequenceRepository

_SELECT = """
    SELECT l.locator_uid, l.locator_no, l.employee_id, l.locator_date, l.destination, l.purpose,
           l.time_departure, l.time_arrival, l.remarks, l.created_by, l.created_at, l.status,
           l.reconciliation_state, l.last_outcome, l.updated_by, l.updated_at,
           e.full_name AS employee_name
    FROM locators l
    LEFT JOIN employees e ON e.employee_id = l.employee_id
"""

# model field -> column, for operator edits
_EDITABLE = {
    "locator_date": "locator_date",
    "destination": "destination",
    "purpose": "purpose",
    "departure": "time_departure",
    "arrival": "time_arrival",
    "remarks": "remarks",
}


def _row_to_record(r: Dict[str, Any]) -> AuthorizationRecord:
    locator_date = r["locator_date"]
    return AuthorizationRecord(
        locator_uid=str(r["locator_uid"]),
        locator_no=r["locator_no"],
        employee_id=int(r["employee_id"]),
        locator_date=locator_date.isoformat() if isinstance(locator_date, date) else str(locator_date),
        destination=r.get("destination"),
        purpose=r.get("purpose"),
        departure=r.get("time_departure") or None,
        arrival=r.get("time_arrival") or None,
        remarks=r.get("remarks"),
        created_by=r.get("created_by"),
        created_at=r["created_at"],
        status=LocatorStatus(r["status"]),
        reconciliation_state=ReconciliationState(r["reconciliation_state"]),
        last_outcome=ReconciliationOutcome(r["last_outcome"]) if r.get("last_outcome") else None,
        updated_by=r.get("updated_by"),
        updated_at=r.get("updated_at"),
        employee_name=r.get("employee_name"),
    )


class MySQLLocatorRepository(MySQLRepositoryBase, LocatorRepository):
    def insert(self, record: AuthorizationRecord, *, seq_date: date, seq_no: int) -> None:
        with translate_errors("insert locator"), self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO locators(locator_uid, locator_no, seq_date, seq_no, employee_id, locator_date,
                                     destination, purpose, time_departure, time_arrival, remarks,
                                     created_by, created_at, status, reconciliation_state)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.locator_uid,
                    record.locator_no,
                    seq_date,
                    int(seq_no),
                    int(record.employee_id),
                    record.locator_date,
                    record.destination,
                    record.purpose,
                    record.departure,
                    record.arrival,
                    record.remarks,
                    record.created_by,
                    record.created_at,
                    record.status.value,
                    record.reconciliation_state.value,
                ),
            )

    def get_by_no(self, locator_no: str, *, for_update: bool = False) -> Optional[AuthorizationRecord]:
        lock = " FOR UPDATE" if for_update else ""
        with translate_errors("load locator"), self._cursor() as cur:
            cur.execute(_SELECT + " WHERE l.locator_no=%s" + lock, (locator_no,))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_page(
        self, *, filters: LocatorFilter, offset: int, limit: int
    ) -> Tuple[Sequence[AuthorizationRecord], int]:
        clauses: list[str] = []
        params: list[object] = []

        if filters.employee_search:
            like = f"%{filters.employee_search}%"
            clauses.append("(CAST(l.employee_id AS CHAR)=%s OR e.full_name LIKE %s OR e.badge_number LIKE %s)")
            params.extend([filters.employee_search, like, like])
        if filters.locator_no_search:
            clauses.append("l.locator_no LIKE %s")
            params.append(f"%{filters.locator_no_search}%")
        if filters.date_from:
            clauses.append("l.locator_date >= %s")
            params.append(filters.date_from)
        if filters.date_to:
            clauses.append("l.locator_date <= %s")
            params.append(filters.date_to)
        if filters.destination_search:
            clauses.append("l.destination LIKE %s")
            params.append(f"%{filters.destination_search}%")
        if filters.purpose_search:
            clauses.append("l.purpose LIKE %s")
            params.append(f"%{filters.purpose_search}%")

        where = (" WHERE " + " AND ".join(clauses)) if clauses else ""

        with translate_errors("list locators"), self._cursor() as cur:
            cur.execute(
                "SELECT COUNT(*) AS total FROM locators l "
                "LEFT JOIN employees e ON e.employee_id = l.employee_id" + where,
                tuple(params),
            )
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                _SELECT + where + " ORDER BY l.created_at DESC, l.seq_no DESC LIMIT %s OFFSET %s",
                tuple(params) + (int(limit), int(offset)),
            )
            return [_row_to_record(r) for r in fetchall(cur)], total

    def count_all(self) -> int:
        with translate_errors("count locators"), self._cursor() as cur:
            cur.execute("SELECT COUNT(*) AS cnt FROM locators")
            return int((fetchone(cur) or {}).get("cnt") or 0)

    def count_active_for_employee_date(self, *, employee_id: int, locator_date: str) -> int:
        with translate_errors("check duplicate locator"), self._cursor() as cur:
            cur.execute(
                """
                SELECT COUNT(*) AS cnt
                FROM locators
                WHERE employee_id=%s AND locator_date=%s AND status=%s
                """,
                (int(employee_id), locator_date, LocatorStatus.ACTIVE.value),
            )
            return int((fetchone(cur) or {}).get("cnt") or 0)

    def monthly_counts(self, *, since: date) -> Sequence[dict]:
        with translate_errors("locator monthly stats"), self._cursor() as cur:
            cur.execute(
                """
                SELECT YEAR(locator_date) AS year, MONTH(locator_date) AS month, COUNT(*) AS count
                FROM locators
                WHERE locator_date >= %s
                GROUP BY YEAR(locator_date), MONTH(locator_date)
                ORDER BY year DESC, month DESC
                """,
                (since,),
            )
            return [
                {"year": int(r["year"]), "month": int(r["month"]), "count": int(r["count"])}
                for r in fetchall(cur)
            ]

    def update_details(self, locator_no: str, *, changes: dict, updated_by: Optional[str], updated_at) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for field_name, value in changes.items():
            col = _EDITABLE.get(field_name)
            if col is None:
                raise ValueError(f"field {field_name!r} is not editable")
            sets.append(f"{col}=%s")
            params.append(value)
        if not sets:
            return True

        sets.extend(["updated_by=%s", "updated_at=%s"])
        params.extend([updated_by, updated_at, locator_no])

        with translate_errors("update locator"), self._cursor() as cur:
            cur.execute(f"UPDATE locators SET {', '.join(sets)} WHERE locator_no=%s", tuple(params))
            return cur.rowcount > 0

    def set_status(
        self,
        locator_no: str,
        *,
        status: LocatorStatus,
        reconciliation_state: ReconciliationState,
        updated_by: Optional[str],
        updated_at,
    ) -> bool:
        with translate_errors("update locator status"), self._cursor() as cur:
            cur.execute(
                """
                UPDATE locators
                SET status=%s, reconciliation_state=%s, updated_by=%s, updated_at=%s
                WHERE locator_no=%s
                """,
                (status.value, reconciliation_state.value, updated_by, updated_at, locator_no),
            )
            return cur.rowcount > 0

    def set_reconciliation(
        self,
        locator_uid: str,
        *,
        state: ReconciliationState,
        outcome: Optional[ReconciliationOutcome],
    ) -> None:
        with translate_errors("record reconciliation"), self._cursor() as cur:
            cur.execute(
                "UPDATE locators SET reconciliation_state=%s, last_outcome=%s WHERE locator_uid=%s",
                (state.value, outcome.value if outcome else None, locator_uid),
            )


class MySQLSequenceRepository(MySQLRepositoryBase, SequenceRepository):
    """Per-day counter rows in `locator_sequences`.

    The first allocation of a day seeds the row from the locators already
    created that day, so numbering continues across a migration from the old
    count-based scheme.
    """

    def allocate(self, seq_date: date) -> int:
        with translate_errors("allocate locator number"), self._cursor() as cur:
            cur.execute(
                """
                INSERT IGNORE INTO locator_sequences(seq_date, last_seq)
                SELECT %s, COUNT(*) FROM locators WHERE seq_date=%s
                """,
                (seq_date, seq_date),
            )
            cur.execute(
                "SELECT last_seq FROM locator_sequences WHERE seq_date=%s FOR UPDATE",
                (seq_date,),
            )
            r = fetchone(cur)
            next_seq = int(r["last_seq"]) + 1
            cur.execute(
                "UPDATE locator_sequences SET last_seq=%s WHERE seq_date=%s",
                (next_seq, seq_date),
            )
            return next_seq
