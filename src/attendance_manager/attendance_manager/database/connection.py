from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import mysql.connector

from ..common.logging_setup import get_logger
from ..core.exceptions import StoreError

_logger = get_logger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: Outside a transaction we create short-lived connections per operation
    (safe for simple Flask apps). Inside :meth:`transaction` every ``db_cursor``
    on the same thread shares one connection, committed once at the end.
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
        )

    def active(self):
        """Connection of the transaction open on this thread, if any."""
        return getattr(self._local, "conn", None)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self.active() is not None:
            # Nested: the outermost block owns commit/rollback.
            yield
            return

        try:
            conn = self.connect()
        except mysql.connector.Error as exc:
            _logger.error("store unavailable", extra={"error": str(exc)})
            raise StoreError(str(exc)) from exc

        self._local.conn = conn
        try:
            yield
            conn.commit()
        except mysql.connector.Error as exc:
            _logger.error("transaction failed", extra={"error": str(exc)})
            conn.rollback()
            raise StoreError(str(exc)) from exc
        except Exception:
            _logger.warning("transaction rolled back")
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            conn.close()
