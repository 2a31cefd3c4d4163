from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import ShiftMode, SlotKind
from ..database.mysql_base import MySQLRepositoryBase, fetchone, mysql_time_text, translate_errors
from .model import ShiftDefinition, ShiftSlot
from .repository import ShiftRepository

# slot kind -> column prefix in `shifts`
_SLOT_COLUMNS = {
    SlotKind.MORNING_IN: "am_checkin",
    SlotKind.MORNING_OUT: "am_checkout",
    SlotKind.AFTERNOON_IN: "pm_checkin",
    SlotKind.AFTERNOON_OUT: "pm_checkout",
}


def _row_to_shift(r: Dict[str, Any]) -> ShiftDefinition:
    slots = []
    for kind, col in _SLOT_COLUMNS.items():
        nominal = mysql_time_text(r.get(col))
        if nominal is None:
            continue
        slots.append(
            ShiftSlot(
                kind=kind,
                nominal=nominal,
                window_start=mysql_time_text(r.get(f"{col}_start")),
                window_end=mysql_time_text(r.get(f"{col}_end")),
            )
        )

    # blank or unknown modes read as AM, matching the shift admin screens
    mode = str(r.get("shift_mode") or "").upper()
    return ShiftDefinition(
        shift_id=int(r["shift_id"]),
        shift_name=r["shift_name"],
        mode=ShiftMode(mode) if mode in ShiftMode.__members__ else ShiftMode.AM,
        slots=tuple(slots),
    )


class MySQLShiftRepository(MySQLRepositoryBase, ShiftRepository):
    def get_by_id(self, shift_id: int) -> Optional[ShiftDefinition]:
        columns = ", ".join(
            f"{col}, {col}_start, {col}_end" for col in _SLOT_COLUMNS.values()
        )
        with translate_errors("load shift"), self._cursor() as cur:
            cur.execute(
                f"""
                SELECT shift_id, shift_name, shift_mode, {columns}
                FROM shifts
                WHERE shift_id=%s
                """,
                (int(shift_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return _row_to_shift(r)
