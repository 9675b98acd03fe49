from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import ReferenceCounterRepository


class MySQLReferenceCounterRepository(ReferenceCounterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def next_value(self, *, prefix: str, year: int) -> int:
        # LAST_INSERT_ID(expr) is per connection, so concurrent callers never
        # read each other's value.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO reference_counters(prefix, year, last_value)
                VALUES(%s,%s,LAST_INSERT_ID(1))
                ON DUPLICATE KEY UPDATE last_value=LAST_INSERT_ID(last_value + 1)
                """,
                (prefix, int(year)),
            )
            cur.execute("SELECT LAST_INSERT_ID() AS value")
            r = fetchone(cur)
            return int(r["value"]) if r else 0
