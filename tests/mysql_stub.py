"""Scripted stand-in for a mysql-connector connection.

Models just enough InnoDB behaviour for the storage layer tests: row locks
taken by `SELECT ... FOR UPDATE` and held until commit or rollback,
savepoints, and a deadlock that rolls back the whole transaction.
"""

from __future__ import annotations

import threading
import time
from datetime import date

import mysql.connector
from mysql.connector import errorcode


def _normalize(sql: str) -> str:
    return " ".join(sql.split())


class StubDatabase:
    """Committed state shared by every connection."""

    def __init__(self):
        self.committed: list[tuple] = []
        self.sequences: dict[date, int] = {}
        self.locator_counts: dict[date, int] = {}
        self.punch_deadlocks = 0
        self.statements: list[tuple[str, tuple]] = []
        self.commits = 0
        self.rollbacks = 0
        self._mutex = threading.Lock()
        self._row_locks: dict[tuple, threading.Lock] = {}
        self._next_id = 1

    def connect(self, **_):
        return StubConnection(self)

    def row_lock(self, key: tuple) -> threading.Lock:
        with self._mutex:
            return self._row_locks.setdefault(key, threading.Lock())

    def next_id(self) -> int:
        with self._mutex:
            value = self._next_id
            self._next_id += 1
            return value

    def log(self, sql: str, params: tuple) -> None:
        with self._mutex:
            self.statements.append((sql, params))


class StubConnection:
    def __init__(self, db: StubDatabase):
        self.db = db
        self.isolation_level = None
        self.pending: list[tuple] = []
        self.seq_writes: dict[date, int] = {}
        self.savepoints: dict[str, int] = {}
        self.held: list[threading.Lock] = []
        self.closed = False

    def start_transaction(self, isolation_level=None):
        self.isolation_level = isolation_level

    def cursor(self, dictionary=False):
        return StubCursor(self)

    def commit(self):
        with self.db._mutex:
            self.db.committed.extend(self.pending)
            self.db.sequences.update(self.seq_writes)
            self.db.commits += 1
        self._reset()

    def rollback(self):
        self.db.rollbacks += 1
        self._reset()

    def close(self):
        self._reset()
        self.closed = True

    def abort(self):
        self._reset()

    def _reset(self):
        self.pending = []
        self.seq_writes = {}
        self.savepoints = {}
        while self.held:
            self.held.pop().release()


class StubCursor:
    def __init__(self, conn: StubConnection):
        self.conn = conn
        self.rowcount = 0
        self.lastrowid = None
        self._rows: list[dict] = []

    def execute(self, sql, params=()):
        sql = _normalize(sql)
        params = tuple(params or ())
        conn, db = self.conn, self.conn.db
        db.log(sql, params)
        self._rows = []
        self.rowcount = 1

        if sql.startswith("SAVEPOINT "):
            conn.savepoints[sql.split()[1]] = len(conn.pending)
        elif sql.startswith("ROLLBACK TO SAVEPOINT "):
            mark = self._savepoint(sql.split()[-1])
            del conn.pending[mark:]
        elif sql.startswith("RELEASE SAVEPOINT "):
            self._savepoint(sql.split()[-1])
            del conn.savepoints[sql.split()[-1]]
        elif sql.startswith("INSERT IGNORE INTO locator_sequences"):
            with db._mutex:
                db.sequences.setdefault(params[0], db.locator_counts.get(params[0], 0))
        elif sql.startswith("SELECT last_seq FROM locator_sequences"):
            if sql.endswith("FOR UPDATE"):
                lock = db.row_lock(("locator_sequences", params[0]))
                lock.acquire()
                conn.held.append(lock)
            self._rows = [{"last_seq": db.sequences[params[0]]}]
            # widen the read-modify-write gap so an unlocked read would collide
            time.sleep(0.005)
        elif sql.startswith("UPDATE locator_sequences"):
            conn.seq_writes[params[1]] = params[0]
        elif sql.startswith("INSERT INTO locators"):
            conn.pending.append(("locator", params[1]))
        elif sql.startswith("INSERT INTO checkinout"):
            if db.punch_deadlocks:
                db.punch_deadlocks -= 1
                conn.abort()
                raise mysql.connector.Error(
                    msg="Deadlock found when trying to get lock; try restarting transaction",
                    errno=errorcode.ER_LOCK_DEADLOCK,
                )
            conn.pending.append(("punch", params[0], params[1]))
            self.lastrowid = db.next_id()

    def _savepoint(self, name: str) -> int:
        if name not in self.conn.savepoints:
            raise mysql.connector.Error(msg=f"SAVEPOINT {name} does not exist", errno=errorcode.ER_SP_DOES_NOT_EXIST)
        return self.conn.savepoints[name]

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass
