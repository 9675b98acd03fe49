from __future__ import annotations

from typing import Optional, Sequence

from ..common.money import to_cents_or_none, to_decimal
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import TeachingClass
from .repository import ClassRepository


def _to_class(row: dict) -> TeachingClass:
    return TeachingClass(
        class_id=int(row["id"]),
        teacher_id=int(row["teacher_id"]),
        class_name=row["class_name"],
        subject=row.get("subject"),
        hourly_rate_cents=to_cents_or_none(row.get("hourly_rate")),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_teacher(self, teacher_id: int) -> Sequence[TeachingClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, teacher_id, class_name, subject, hourly_rate
                FROM classes
                WHERE teacher_id=%s
                ORDER BY class_name ASC
                """,
                (int(teacher_id),),
            )
            return [_to_class(r) for r in fetchall(cur)]

    def get(self, *, teacher_id: int, class_id: int) -> Optional[TeachingClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, teacher_id, class_name, subject, hourly_rate
                FROM classes
                WHERE id=%s AND teacher_id=%s
                """,
                (int(class_id), int(teacher_id)),
            )
            r = fetchone(cur)
            return _to_class(r) if r else None

    def create(
        self,
        *,
        teacher_id: int,
        class_name: str,
        subject: Optional[str],
        hourly_rate_cents: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO classes(teacher_id, class_name, subject, hourly_rate)
                VALUES(%s,%s,%s,%s)
                """,
                (int(teacher_id), class_name, subject, to_decimal(hourly_rate_cents)),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        teacher_id: int,
        class_id: int,
        class_name: str,
        subject: Optional[str],
        hourly_rate_cents: Optional[int],
    ) -> bool:
        # teacher_id only scopes the row; it is never rewritten.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE classes
                SET class_name=%s, subject=%s, hourly_rate=%s
                WHERE id=%s AND teacher_id=%s
                """,
                (class_name, subject, to_decimal(hourly_rate_cents), int(class_id), int(teacher_id)),
            )
            return cur.rowcount > 0

    def delete(self, *, teacher_id: int, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM classes WHERE id=%s AND teacher_id=%s",
                (int(class_id), int(teacher_id)),
            )
            return cur.rowcount > 0
