from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from ..common.money import to_cents_or_none
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_date
from .model import LessonSchedule
from .repository import ScheduleRepository

_COLUMNS = "id, class_id, student_id, lesson_date, duration_minutes, hourly_rate"


def _to_schedule(r: dict) -> LessonSchedule:
    return LessonSchedule(
        schedule_id=int(r["id"]),
        class_id=int(r["class_id"]),
        student_id=int(r["student_id"]),
        lesson_date=normalize_mysql_date(r["lesson_date"]),
        duration_minutes=int(r["duration_minutes"]) if r.get("duration_minutes") is not None else None,
        hourly_rate_cents=to_cents_or_none(r.get("hourly_rate")),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[LessonSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM lesson_schedules WHERE id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def ensure(self, *, class_id: int, student_id: int, lesson_date: date) -> int:
        # Single statement against the UNIQUE(class_id, student_id, lesson_date)
        # key: LAST_INSERT_ID(id) hands back the existing row's id on conflict.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO lesson_schedules(class_id, student_id, lesson_date)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE id=LAST_INSERT_ID(id)
                """,
                (int(class_id), int(student_id), lesson_date),
            )
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT id FROM lesson_schedules WHERE class_id=%s AND student_id=%s AND lesson_date=%s",
                (int(class_id), int(student_id), lesson_date),
            )
            r = fetchone(cur)
            return int(r["id"]) if r else 0

    def list_for_class(self, *, class_id: int, start: date, end: date) -> Sequence[LessonSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM lesson_schedules
                WHERE class_id=%s AND lesson_date >= %s AND lesson_date < %s
                ORDER BY lesson_date ASC, id ASC
                """,
                (int(class_id), start, end),
            )
            return [_to_schedule(r) for r in fetchall(cur)]

    def list_for_student(
        self, *, class_id: int, student_id: int, start: date, end: date
    ) -> Sequence[LessonSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM lesson_schedules
                WHERE class_id=%s AND student_id=%s AND lesson_date >= %s AND lesson_date < %s
                ORDER BY lesson_date ASC, id ASC
                """,
                (int(class_id), int(student_id), start, end),
            )
            return [_to_schedule(r) for r in fetchall(cur)]

    def student_ids_by_class(self, *, class_ids: Iterable[int]) -> Mapping[int, set[int]]:
        ids = sorted({int(i) for i in class_ids})
        out: dict[int, set[int]] = {i: set() for i in ids}
        if not ids:
            return out
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT DISTINCT class_id, student_id
                FROM lesson_schedules
                WHERE class_id IN ({in_clause(ids)})
                """,
                tuple(ids),
            )
            for r in fetchall(cur):
                out[int(r["class_id"])].add(int(r["student_id"]))
        return out

    def delete_for_student(self, *, class_id: int, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM lesson_schedules WHERE class_id=%s AND student_id=%s",
                (int(class_id), int(student_id)),
            )
            return int(cur.rowcount)
