from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from ..common.money import to_cents, to_decimal
from ..core.enums import PaymentMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_date
from .model import Payment
from .repository import PaymentRepository

_COLUMNS = "id, payment_reference, invoice_id, student_id, amount, payment_date, payment_method, notes, created_at"


def _to_payment(r: dict) -> Payment:
    return Payment(
        payment_id=int(r["id"]),
        payment_reference=r["payment_reference"],
        invoice_id=int(r["invoice_id"]),
        student_id=int(r["student_id"]),
        amount_cents=to_cents(r["amount"]),
        payment_date=normalize_mysql_date(r["payment_date"]),
        payment_method=PaymentMethod(r["payment_method"]),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(
        self,
        *,
        invoice_id: int,
        student_id: int,
        payment_reference: str,
        amount_cents: int,
        payment_date: date,
        payment_method: PaymentMethod,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(payment_reference, invoice_id, student_id, amount, payment_date, payment_method, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    payment_reference,
                    int(invoice_id),
                    int(student_id),
                    to_decimal(amount_cents),
                    payment_date,
                    payment_method.value,
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def latest_for_invoice(self, invoice_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payments
                WHERE invoice_id=%s
                ORDER BY payment_date DESC, created_at DESC, id DESC
                LIMIT 1
                """,
                (int(invoice_id),),
            )
            r = fetchone(cur)
            return _to_payment(r) if r else None

    def delete(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE id=%s", (int(payment_id),))
            return cur.rowcount > 0

    def paid_totals(self, invoice_ids: Iterable[int]) -> Mapping[int, int]:
        ids = sorted({int(i) for i in invoice_ids})
        out = {i: 0 for i in ids}
        if not ids:
            return out
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT invoice_id, COALESCE(SUM(amount), 0) AS paid
                FROM payments
                WHERE invoice_id IN ({in_clause(ids)})
                GROUP BY invoice_id
                """,
                tuple(ids),
            )
            for r in fetchall(cur):
                out[int(r["invoice_id"])] = to_cents(r["paid"])
        return out

    def list_for_invoice(self, invoice_id: int) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payments
                WHERE invoice_id=%s
                ORDER BY payment_date ASC, created_at ASC, id ASC
                """,
                (int(invoice_id),),
            )
            return [_to_payment(r) for r in fetchall(cur)]
