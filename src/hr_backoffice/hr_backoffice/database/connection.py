from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Protocol

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StoreConflict

_TRANSIENT_ERRNOS = frozenset({errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT})


def translate_error(e: mysql.connector.Error) -> Exception:
    """Deadlocks and lock timeouts become StoreConflict, everything else is kept."""
    if getattr(e, "errno", None) in _TRANSIENT_ERRNOS:
        return StoreConflict(str(e))
    return e


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class TransactionManager(Protocol):
    """What services need from the store: an all-or-nothing block."""

    def atomic(self):
        raise NotImplementedError


class _ActiveTransaction:
    def __init__(self, conn, cur):
        self.conn = conn
        self.cur = cur
        self.depth = 0


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation. ``atomic()`` pins one
    connection to the current thread so every repository call inside the block
    shares the same transaction.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            autocommit=False,
        )

    def current(self) -> Optional[_ActiveTransaction]:
        return getattr(self._local, "tx", None)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        tx = self.current()
        if tx is not None:
            # Nested block joins the outer transaction.
            tx.depth += 1
            try:
                yield
            finally:
                tx.depth -= 1
            return

        conn = self.connect()
        cur = conn.cursor(dictionary=True)
        self._local.tx = _ActiveTransaction(conn, cur)
        try:
            conn.start_transaction(isolation_level="READ COMMITTED")
            yield
            conn.commit()
        except mysql.connector.Error as e:
            conn.rollback()
            raise translate_error(e)
        except BaseException:
            conn.rollback()
            raise
        finally:
            self._local.tx = None
            cur.close()
            conn.close()
