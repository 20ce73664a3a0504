from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConcurrencyConflictError, StoreTimeoutError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

ER_QUERY_TIMEOUT = 3024

_TIMEOUT_ERRNOS = frozenset(
    {
        errorcode.ER_LOCK_WAIT_TIMEOUT,
        ER_QUERY_TIMEOUT,
        errorcode.CR_SERVER_LOST,
        errorcode.CR_CONN_HOST_ERROR,
        errorcode.CR_CONNECTION_ERROR,
    }
)


def _translate(exc: mysql.connector.Error) -> Optional[Exception]:
    if exc.errno == errorcode.ER_LOCK_DEADLOCK:
        return ConcurrencyConflictError(
            "Concurrent update detected, refresh and retry",
            details={"errno": exc.errno},
        )
    if exc.errno in _TIMEOUT_ERRNOS:
        return StoreTimeoutError(
            "The data store did not answer in time, retry later",
            details={"errno": exc.errno},
        )
    return None


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, roll back on any error.

    Lock timeouts and dropped connections surface as ``StoreTimeoutError`` and
    deadlocks as ``ConcurrencyConflictError`` so callers can retry.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        translated = _translate(exc)
        if translated is None:
            raise
        logger.warning("database connect failed: %s", exc)
        raise translated from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        translated = _translate(exc)
        if translated is None:
            raise
        logger.warning("database operation failed: %s", exc)
        raise translated from exc
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
