from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errors as mysql_errors

from ..core.exceptions import BackendUnavailableError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Connection-level failures; integrity/programming errors propagate unchanged.
_UNAVAILABLE_ERRORS = (mysql_errors.InterfaceError, mysql_errors.OperationalError, mysql_errors.PoolError)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Cannot connect to MySQL: %s", exc)
        raise BackendUnavailableError("The database is unavailable. Please try again later.") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except _UNAVAILABLE_ERRORS as exc:
        logger.error("MySQL connection lost: %s", exc)
        raise BackendUnavailableError("The database is unavailable. Please try again later.") from exc
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


def load_json_body(value: Any) -> dict:
    """Normalize JSON column values across connector implementations.

    mysql-connector can return JSON as str, bytes or bytearray.
    """
    if value is None:
        return {}
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, dict):
        return value
    return json.loads(value)
