from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.mysql_base import MySQLRepositoryBase, fetchone, translate_errors
from .model import AttendancePunch, PunchMetadata
from .repository import PunchRepository


def _check_time_text(value) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)


class MySQLPunchRepository(MySQLRepositoryBase, PunchRepository):
    def find(self, *, employee_id: int, check_time: str) -> Optional[AttendancePunch]:
        # check_time goes over the wire as a string literal; DATETIME compares
        # it as wall-clock text with no zone conversion.
        with translate_errors("look up punch"), self._cursor() as cur:
            cur.execute(
                """
                SELECT punch_id, user_id, check_time, check_type, verify_code, sensor_id,
                       memo_info, work_code, sn, user_ext_fmt, synthesized
                FROM checkinout
                WHERE user_id=%s AND check_time=%s
                ORDER BY synthesized DESC, punch_id ASC
                LIMIT 1
                """,
                (int(employee_id), check_time),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendancePunch(
                punch_id=int(r["punch_id"]),
                employee_id=int(r["user_id"]),
                check_time=_check_time_text(r["check_time"]),
                check_type=r["check_type"],
                metadata=PunchMetadata(
                    verify_code=int(r.get("verify_code") or 0),
                    sensor_id=r.get("sensor_id") or "",
                    memo=r.get("memo_info"),
                    work_code=r.get("work_code") or "",
                    device_sn=r.get("sn") or "",
                    user_ext_fmt=int(r.get("user_ext_fmt") or 0),
                ),
                synthesized=bool(r.get("synthesized")),
            )

    def insert(self, punch: AttendancePunch) -> int:
        m = punch.metadata
        with translate_errors("insert punch"), self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO checkinout(user_id, check_time, check_type, verify_code, sensor_id,
                                       memo_info, work_code, sn, user_ext_fmt, synthesized)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(punch.employee_id),
                    punch.check_time,
                    punch.check_type,
                    m.verify_code,
                    m.sensor_id,
                    m.memo,
                    m.work_code,
                    m.device_sn,
                    m.user_ext_fmt,
                    1 if punch.synthesized else None,
                ),
            )
            return int(cur.lastrowid)
