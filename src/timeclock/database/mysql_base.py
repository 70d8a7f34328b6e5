from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
import structlog
from mysql.connector import errorcode

from ..core.exceptions import DuplicateRecordError, PersistenceError
from .connection import DatabaseConnection

logger = structlog.get_logger(__name__)


def _rollback_quietly(conn) -> None:
    # A dropped connection must not mask the error being reported.
    try:
        conn.rollback()
    except mysql.connector.Error as e:
        logger.warning("rollback_failed", error=str(e))


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error.

    Driver errors surface as ``PersistenceError`` (``DuplicateRecordError`` for
    unique-key conflicts) so callers never see mysql-connector types.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise PersistenceError("Database unavailable", details=str(e)) from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        _rollback_quietly(conn)
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateRecordError("Record already exists", details=str(e)) from e
        raise PersistenceError("Database constraint violated", details=str(e)) from e
    except mysql.connector.Error as e:
        _rollback_quietly(conn)
        raise PersistenceError("Database operation failed", details=str(e)) from e
    except Exception:
        _rollback_quietly(conn)
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json_column(value: Any) -> Any:
    """MySQL JSON columns come back as str (or bytes) from mysql-connector."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else None
    return value
