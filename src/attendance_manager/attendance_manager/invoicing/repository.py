from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import InvoiceStatus
from .model import Invoice, InvoiceLineItem


class InvoiceRepository(Protocol):
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
        raise NotImplementedError

    def add_line_item(
        self,
        *,
        invoice_id: int,
        description: str,
        quantity: int,
        unit_price_cents: int,
        total_price_cents: int,
    ) -> int:
        raise NotImplementedError

    def get(self, *, teacher_id: int, invoice_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[Invoice]:
        """Newest first: invoice_date desc, then id desc."""

        raise NotImplementedError

    def list_line_items(self, invoice_id: int) -> Sequence[InvoiceLineItem]:
        raise NotImplementedError

    def set_status(self, *, invoice_id: int, status: InvoiceStatus) -> bool:
        raise NotImplementedError

    def delete(self, *, teacher_id: int, invoice_ids: Iterable[int]) -> int:
        """Delete the teacher's invoices among ``invoice_ids``; return how many went."""

        raise NotImplementedError
