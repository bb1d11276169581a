from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StoreError, StoreTimeout
from .connection import DatabaseConnection

_TIMEOUT_ERRNOS = {
    errorcode.CR_CONN_HOST_ERROR,
    errorcode.CR_SERVER_LOST,
    errorcode.CR_SERVER_GONE_ERROR,
    errorcode.ER_LOCK_WAIT_TIMEOUT,
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


@contextmanager
def store_cursor(conn_factory: DatabaseConnection):
    """Like db_cursor, but driver failures surface as StoreError/StoreTimeout."""
    try:
        with db_cursor(conn_factory) as (conn, cur):
            yield conn, cur
    except mysql.connector.Error as e:
        if e.errno in _TIMEOUT_ERRNOS:
            raise StoreTimeout(str(e)) from e
        raise StoreError(str(e)) from e


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
