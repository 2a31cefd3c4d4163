from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, StorageError, TransactionAbortedError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Only the failed statement is undone; the open transaction is still usable.
_CONFLICT_ERRNOS = {
    errorcode.ER_DUP_ENTRY,
    errorcode.ER_LOCK_WAIT_TIMEOUT,
}

# InnoDB has already rolled back the whole transaction, savepoints included.
_ABORT_ERRNOS = {
    errorcode.ER_LOCK_DEADLOCK,
}


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Map driver errors onto the domain taxonomy.

    Duplicate keys and lock wait timeouts become ConflictError. A deadlock
    becomes TransactionAbortedError: nothing may run in that transaction
    afterwards. Every other driver failure becomes StorageError.
    """

    try:
        yield
    except mysql.connector.Error as e:
        if getattr(e, "errno", None) in _ABORT_ERRNOS:
            logger.warning("%s: transaction aborted by server: %s", action, e)
            raise TransactionAbortedError(f"{action}: {e.msg}") from e
        if getattr(e, "errno", None) in _CONFLICT_ERRNOS:
            raise ConflictError(f"{action}: {e.msg}") from e
        logger.error("%s failed: %s", action, e)
        raise StorageError(f"{action}: {e}") from e


class MySQLRepositoryBase:
    """Shared plumbing for mysql-connector repositories.

    A repository either owns short-lived connections (one per call, committed
    immediately) or is bound to the cursor of an open unit of work, in which
    case commit/rollback belong to the unit of work.
    """

    def __init__(self, conn_factory: Optional[DatabaseConnection] = None, *, cursor=None):
        if conn_factory is None and cursor is None:
            raise ValueError("conn_factory or cursor is required")
        self._conn_factory = conn_factory
        self._bound_cursor = cursor

    @contextmanager
    def _cursor(self):
        if self._bound_cursor is not None:
            yield self._bound_cursor
            return
        with db_cursor(self._conn_factory) as (_, cur):
            yield cur


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def mysql_time_text(value: Any) -> Optional[str]:
    """TIME column value as `HH:MM:SS` text (None stays None)."""
    t = normalize_mysql_time(value)
    return t.strftime("%H:%M:%S") if t is not None else None
