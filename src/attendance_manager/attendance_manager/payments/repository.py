from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import PaymentMethod
from .model import Payment


class PaymentRepository(Protocol):
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
        raise NotImplementedError

    def latest_for_invoice(self, invoice_id: int) -> Optional[Payment]:
        """Most recent entry: payment_date desc, then created_at desc."""

        raise NotImplementedError

    def delete(self, payment_id: int) -> bool:
        raise NotImplementedError

    def paid_totals(self, invoice_ids: Iterable[int]) -> Mapping[int, int]:
        """Ledger sum in cents per invoice; invoices without payments map to 0."""

        raise NotImplementedError

    def list_for_invoice(self, invoice_id: int) -> Sequence[Payment]:
        raise NotImplementedError
