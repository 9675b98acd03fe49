from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.money import to_cents_or_none, to_decimal
from ..core.enums import PaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_date
from .model import Student
from .repository import StudentRepository

_COLUMNS = "id, teacher_id, student_name, parent_email, payment_status, invoice_amount, last_payment_date"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["id"]),
        teacher_id=int(r["teacher_id"]),
        student_name=r["student_name"],
        parent_email=r.get("parent_email"),
        payment_status=PaymentStatus(r.get("payment_status") or PaymentStatus.PENDING.value),
        invoice_amount_cents=to_cents_or_none(r.get("invoice_amount")),
        last_payment_date=normalize_mysql_date(r.get("last_payment_date")),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_teacher(self, teacher_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE teacher_id=%s ORDER BY student_name ASC",
                (int(teacher_id),),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_ids(self, *, teacher_id: int, student_ids: Iterable[int]) -> Sequence[Student]:
        ids = sorted({int(i) for i in student_ids})
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE teacher_id=%s AND id IN ({in_clause(ids)})
                ORDER BY student_name ASC
                """,
                (int(teacher_id), *ids),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def get(self, *, teacher_id: int, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE id=%s AND teacher_id=%s",
                (int(student_id), int(teacher_id)),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def create(
        self,
        *,
        teacher_id: int,
        student_name: str,
        parent_email: Optional[str],
        payment_status: PaymentStatus,
        invoice_amount_cents: Optional[int],
        last_payment_date: Optional[date],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(teacher_id, student_name, parent_email, payment_status, invoice_amount, last_payment_date)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(teacher_id),
                    student_name,
                    parent_email,
                    payment_status.value,
                    to_decimal(invoice_amount_cents),
                    last_payment_date,
                ),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        teacher_id: int,
        student_id: int,
        student_name: str,
        parent_email: Optional[str],
        payment_status: PaymentStatus,
        invoice_amount_cents: Optional[int],
        last_payment_date: Optional[date],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET student_name=%s, parent_email=%s, payment_status=%s, invoice_amount=%s, last_payment_date=%s
                WHERE id=%s AND teacher_id=%s
                """,
                (
                    student_name,
                    parent_email,
                    payment_status.value,
                    to_decimal(invoice_amount_cents),
                    last_payment_date,
                    int(student_id),
                    int(teacher_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, *, teacher_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM students WHERE id=%s AND teacher_id=%s",
                (int(student_id), int(teacher_id)),
            )
            return cur.rowcount > 0
