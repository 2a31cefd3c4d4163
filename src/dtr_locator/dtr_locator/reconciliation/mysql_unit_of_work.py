from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Optional

import mysql.connector

from ..core.exceptions import TransactionAbortedError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import translate_errors
from ..locators.mysql_locator_repository import MySQLLocatorRepository, MySQLSequenceRepository
from ..punches.mysql_punch_repository import MySQLPunchRepository

logger = logging.getLogger(__name__)

_SAVEPOINT_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class MySQLUnitOfWork:
    """mysql-connector transaction with repositories bound to its cursor."""

    def __init__(self, conn_factory: DatabaseConnection, *, isolation_level: str = "READ COMMITTED"):
        self._conn_factory = conn_factory
        self._isolation_level = isolation_level
        self._conn = None
        self._cur = None
        self._committed = False

    def __enter__(self) -> "MySQLUnitOfWork":
        with translate_errors("open transaction"):
            self._conn = self._conn_factory.connect()
            self._conn.start_transaction(isolation_level=self._isolation_level)
            self._cur = self._conn.cursor(dictionary=True)

        self.locators = MySQLLocatorRepository(cursor=self._cur)
        self.sequences = MySQLSequenceRepository(cursor=self._cur)
        self.punches = MySQLPunchRepository(cursor=self._cur)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if not self._committed:
                self._rollback_quietly()
        finally:
            try:
                if self._cur is not None:
                    self._cur.close()
            finally:
                if self._conn is not None:
                    self._conn.close()
                self._cur = None
                self._conn = None

    @contextmanager
    def savepoint(self, name: str):
        if not _SAVEPOINT_NAME.match(name):
            raise ValueError(f"invalid savepoint name: {name!r}")

        with translate_errors(f"savepoint {name}"):
            self._cur.execute(f"SAVEPOINT {name}")
        try:
            yield
        except TransactionAbortedError:
            # the savepoint went with the transaction
            raise
        except Exception:
            try:
                self._cur.execute(f"ROLLBACK TO SAVEPOINT {name}")
            except mysql.connector.Error as e:
                raise TransactionAbortedError(f"transaction aborted inside savepoint {name}: {e}") from e
            raise
        else:
            try:
                self._cur.execute(f"RELEASE SAVEPOINT {name}")
            except mysql.connector.Error as e:
                raise TransactionAbortedError(f"savepoint {name} lost: {e}") from e

    def commit(self) -> None:
        with translate_errors("commit"):
            self._conn.commit()
        self._committed = True

    def _rollback_quietly(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.rollback()
        except mysql.connector.Error as e:
            logger.error("rollback failed: %s", e)


def mysql_unit_of_work_factory(conn_factory: DatabaseConnection, *, isolation_level: Optional[str] = None):
    def factory() -> MySQLUnitOfWork:
        return MySQLUnitOfWork(conn_factory, isolation_level=isolation_level or "READ COMMITTED")

    return factory
