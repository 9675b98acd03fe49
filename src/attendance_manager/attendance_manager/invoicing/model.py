from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..core.enums import InvoiceStatus
from ..payments.model import Payment
from ..payments.status import effective_status


@dataclass(frozen=True)
class InvoiceSummary:
    """Billing figures for one student in one class for one month."""

    attended: int
    total: int
    unit_cents: int
    subtotal_cents: int


@dataclass(frozen=True)
class Invoice:
    invoice_id: int
    invoice_number: str
    teacher_id: int
    student_id: int
    invoice_date: date
    due_date: date
    total_cents: int
    tax_cents: int = 0
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: Optional[str] = None
    student_name: Optional[str] = None


@dataclass(frozen=True)
class InvoiceLineItem:
    line_item_id: int
    invoice_id: int
    description: str
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    lesson_schedule_id: Optional[int] = None


@dataclass(frozen=True)
class InvoiceView:
    """An invoice together with what its ledger says."""

    invoice: Invoice
    paid_cents: int

    @property
    def due_cents(self) -> int:
        return max(0, self.invoice.total_cents - self.paid_cents)

    @property
    def effective_status(self) -> InvoiceStatus:
        return effective_status(
            self.invoice.status,
            paid_cents=self.paid_cents,
            total_cents=self.invoice.total_cents,
        )


@dataclass(frozen=True)
class InvoiceDetail:
    view: InvoiceView
    line_items: Sequence[InvoiceLineItem]
    payments: Sequence[Payment]


@dataclass(frozen=True)
class MailDraft:
    """A ready-to-open ``mailto:`` for the parent; nothing is sent server side."""

    invoice: Invoice
    to: str
    subject: str
    body: str
    mailto: str
