from __future__ import annotations

import json
import logging
import time as _time
from contextlib import contextmanager
from datetime import timedelta
from decimal import Decimal
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, TypeVar

import mysql.connector
from mysql.connector import errorcode

from ..core.constants import DEFAULT_STORE_RETRY_ATTEMPTS, STORE_RETRY_BASE_DELAY, STORE_RETRY_MAX_DELAY
from ..core.exceptions import StoreConflict
from .connection import DatabaseConnection, translate_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

_retry_attempts = DEFAULT_STORE_RETRY_ATTEMPTS


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    tx = conn_factory.current()
    if tx is not None:
        # Inside atomic(): commit/rollback belongs to the outer block.
        try:
            yield tx.conn, tx.cur
        except mysql.connector.Error as e:
            raise translate_error(e)
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        raise translate_error(e)
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_duplicate_key(e: Exception) -> bool:
    return isinstance(e, mysql.connector.IntegrityError) and e.errno == errorcode.ER_DUP_ENTRY


def compute_backoff(attempt: int) -> timedelta:
    """Exponential backoff: base, 2*base, 4*base ... capped."""
    delay = STORE_RETRY_BASE_DELAY * (2 ** max(attempt - 1, 0))
    return min(delay, STORE_RETRY_MAX_DELAY)


def configure_retries(attempts: int) -> None:
    """Default number of attempts for units of work without an explicit value."""
    global _retry_attempts
    if int(attempts) < 1:
        raise ValueError("attempts must be >= 1")
    _retry_attempts = int(attempts)


def retry_on_conflict(func: Optional[Callable[..., T]] = None, *, attempts: Optional[int] = None):
    """Retry a whole unit of work when the store reports a transient conflict.

    Domain errors propagate immediately; only StoreConflict is retried.
    """

    def decorate(fn: Callable[..., T]) -> Callable[..., T]:
        @wraps(fn)
        def wrapper(*args, **kwargs) -> T:
            limit = attempts or _retry_attempts
            attempt = 1
            while True:
                try:
                    return fn(*args, **kwargs)
                except StoreConflict:
                    if attempt >= limit:
                        raise
                    delay = compute_backoff(attempt)
                    logger.warning("store conflict in %s, retry %d/%d in %s", fn.__name__, attempt, limit, delay)
                    _time.sleep(delay.total_seconds())
                    attempt += 1

        return wrapper

    if func is not None:
        return decorate(func)
    return decorate


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_json(value: Any) -> str:
    return json.dumps(value)


def from_json(value: Any, default: Any = None) -> Any:
    """Decode a MySQL JSON column (returned as str or bytes by the connector)."""
    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return value


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
