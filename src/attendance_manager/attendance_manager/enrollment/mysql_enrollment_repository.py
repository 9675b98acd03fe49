from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .repository import EnrollmentRepository


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def enroll(self, *, class_id: int, student_id: int, joined_on: date) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO enrollments(class_id, student_id, joined_on)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE joined_on=joined_on
                """,
                (int(class_id), int(student_id), joined_on),
            )

    def unenroll(self, *, class_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM enrollments WHERE class_id=%s AND student_id=%s",
                (int(class_id), int(student_id)),
            )
            return cur.rowcount > 0

    def student_ids_by_class(self, *, class_ids: Iterable[int]) -> Mapping[int, set[int]]:
        ids = sorted({int(i) for i in class_ids})
        out: dict[int, set[int]] = {i: set() for i in ids}
        if not ids:
            return out
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT class_id, student_id FROM enrollments WHERE class_id IN ({in_clause(ids)})",
                tuple(ids),
            )
            for r in fetchall(cur):
                out[int(r["class_id"])].add(int(r["student_id"]))
        return out
