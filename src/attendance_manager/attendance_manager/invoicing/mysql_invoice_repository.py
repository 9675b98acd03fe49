from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.money import to_cents, to_decimal
from ..core.enums import InvoiceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_date
from .model import Invoice, InvoiceLineItem
from .repository import InvoiceRepository

_SELECT = """
    SELECT i.id, i.invoice_number, i.teacher_id, i.student_id, i.invoice_date, i.due_date,
           i.total_amount, i.tax_amount, i.status, i.notes, s.student_name
    FROM invoices i
    LEFT JOIN students s ON s.id = i.student_id
"""


def _to_invoice(r: dict) -> Invoice:
    return Invoice(
        invoice_id=int(r["id"]),
        invoice_number=r["invoice_number"],
        teacher_id=int(r["teacher_id"]),
        student_id=int(r["student_id"]),
        invoice_date=normalize_mysql_date(r["invoice_date"]),
        due_date=normalize_mysql_date(r["due_date"]),
        total_cents=to_cents(r["total_amount"]),
        tax_cents=to_cents(r.get("tax_amount") or 0),
        status=InvoiceStatus(r["status"]),
        notes=r.get("notes"),
        student_name=r.get("student_name"),
    )


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        teacher_id: int,
        student_id: int,
        invoice_number: str,
        invoice_date: date,
        due_date: date,
        total_cents: int,
        tax_cents: int,
        status: InvoiceStatus,
        notes: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invoices(invoice_number, teacher_id, student_id, invoice_date, due_date,
                                     total_amount, tax_amount, status, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    invoice_number,
                    int(teacher_id),
                    int(student_id),
                    invoice_date,
                    due_date,
                    to_decimal(total_cents),
                    to_decimal(tax_cents),
                    status.value,
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def add_line_item(
        self,
        *,
        invoice_id: int,
        description: str,
        quantity: int,
        unit_price_cents: int,
        total_price_cents: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invoice_line_items(invoice_id, description, quantity, unit_price, total_price)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(invoice_id),
                    description,
                    int(quantity),
                    to_decimal(unit_price_cents),
                    to_decimal(total_price_cents),
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, teacher_id: int, invoice_id: int) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE i.teacher_id=%s AND i.id=%s", (int(teacher_id), int(invoice_id)))
            r = fetchone(cur)
            return _to_invoice(r) if r else None

    def list_for_teacher(self, teacher_id: int) -> Sequence[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE i.teacher_id=%s ORDER BY i.invoice_date DESC, i.id DESC",
                (int(teacher_id),),
            )
            return [_to_invoice(r) for r in fetchall(cur)]

    def list_line_items(self, invoice_id: int) -> Sequence[InvoiceLineItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, invoice_id, lesson_schedule_id, description, quantity, unit_price, total_price
                FROM invoice_line_items
                WHERE invoice_id=%s
                ORDER BY created_at ASC, id ASC
                """,
                (int(invoice_id),),
            )
            return [
                InvoiceLineItem(
                    line_item_id=int(r["id"]),
                    invoice_id=int(r["invoice_id"]),
                    description=r["description"],
                    quantity=int(r["quantity"]),
                    unit_price_cents=to_cents(r["unit_price"]),
                    total_price_cents=to_cents(r["total_price"]),
                    lesson_schedule_id=int(r["lesson_schedule_id"]) if r.get("lesson_schedule_id") is not None else None,
                )
                for r in fetchall(cur)
            ]

    def set_status(self, *, invoice_id: int, status: InvoiceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE invoices SET status=%s WHERE id=%s", (status.value, int(invoice_id)))
            return cur.rowcount > 0

    def delete(self, *, teacher_id: int, invoice_ids: Iterable[int]) -> int:
        ids = sorted({int(i) for i in invoice_ids})
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM invoices WHERE teacher_id=%s AND id IN ({in_clause(ids)})",
                (int(teacher_id), *ids),
            )
            return int(cur.rowcount)
