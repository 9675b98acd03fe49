from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, lesson_schedule_id, student_id, attended, notes, recorded_at, recorded_by"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["id"]),
        lesson_schedule_id=int(r["lesson_schedule_id"]),
        student_id=int(r["student_id"]),
        attended=bool(r["attended"]),
        notes=r.get("notes"),
        recorded_at=r.get("recorded_at"),
        recorded_by=int(r["recorded_by"]) if r.get("recorded_by") is not None else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, lesson_schedule_id: int, student_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE lesson_schedule_id=%s AND student_id=%s
                """,
                (int(lesson_schedule_id), int(student_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        lesson_schedule_id: int,
        student_id: int,
        attended: bool,
        recorded_at: datetime,
        recorded_by: int,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(lesson_schedule_id, student_id, attended, notes, recorded_at, recorded_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(lesson_schedule_id), int(student_id), 1 if attended else 0, notes, recorded_at, int(recorded_by)),
            )
            return int(cur.lastrowid)

    def update(self, *, record_id: int, attended: bool, recorded_at: datetime, recorded_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET attended=%s, recorded_at=%s, recorded_by=%s
                WHERE id=%s
                """,
                (1 if attended else 0, recorded_at, int(recorded_by), int(record_id)),
            )
            return cur.rowcount > 0

    def list_for_schedules(
        self, *, schedule_ids: Iterable[int], student_id: Optional[int] = None
    ) -> Sequence[AttendanceRecord]:
        ids = sorted({int(i) for i in schedule_ids})
        if not ids:
            return []

        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE lesson_schedule_id IN ({in_clause(ids)})"
        params: list = list(ids)
        if student_id is not None:
            sql += " AND student_id=%s"
            params.append(int(student_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]
