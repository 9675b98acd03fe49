from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector

from ..common.logging_setup import get_logger
from ..core.exceptions import StoreError
from .connection import DatabaseConnection

_logger = get_logger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``.

    Joins the thread's open transaction when there is one; otherwise opens a
    connection for this block and commits it on exit. Driver errors surface
    as :class:`StoreError`.
    """
    shared = conn_factory.active()
    if shared is not None:
        cur = shared.cursor(dictionary=dictionary)
        try:
            yield shared, cur
        except mysql.connector.Error as exc:
            _logger.error("store statement failed", extra={"error": str(exc)})
            raise StoreError(str(exc)) from exc
        finally:
            cur.close()
        return

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        _logger.error("store unavailable", extra={"error": str(exc)})
        raise StoreError(str(exc)) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        _logger.error("store statement failed", extra={"error": str(exc)})
        raise StoreError(str(exc)) from exc
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


def in_clause(values: Sequence[Any]) -> str:
    """Placeholder list for ``IN (...)``; callers must skip empty sequences."""
    return ", ".join(["%s"] * len(values))


def normalize_mysql_date(value: Any) -> Optional[date]:
    """mysql-connector returns DATE as ``date``; some builds hand back strings."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.strptime(value[:10], "%Y-%m-%d").date()
    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")
