from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.logging_setup import get_logger
from ..common.money import parse_positive_amount
from ..core.constants import PAYMENT_PREFIX
from ..core.enums import PaymentMethod
from ..core.exceptions import NotFoundError, ValidationError
from ..database.transactions import NoTransaction, TransactionManager
from ..invoicing.model import Invoice, InvoiceView
from ..invoicing.repository import InvoiceRepository
from ..references.service import ReferenceGenerator
from .repository import PaymentRepository
from .status import status_after_payment, status_after_undo

_logger = get_logger(__name__)


def parse_method(value: Optional[str]) -> PaymentMethod:
    try:
        return PaymentMethod((value or PaymentMethod.CASH.value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown payment method: {value!r}")


class PaymentLedger:
    """Append and undo payments; the invoice status follows the ledger sum.

    Every ledger change and the status it implies are written in one
    transaction.
    """

    def __init__(
        self,
        payments: PaymentRepository,
        invoices: InvoiceRepository,
        references: ReferenceGenerator,
        *,
        tx: Optional[TransactionManager] = None,
    ):
        self._payments = payments
        self._invoices = invoices
        self._references = references
        self._tx = tx or NoTransaction()

    def _require_invoice(self, teacher_id: int, invoice_id: int) -> Invoice:
        invoice = self._invoices.get(teacher_id=int(teacher_id), invoice_id=int(invoice_id))
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    def _paid(self, invoice_id: int) -> int:
        return self._payments.paid_totals([invoice_id]).get(invoice_id, 0)

    def record_payment(
        self,
        teacher_id: int,
        invoice_id: int,
        amount,
        method: Optional[str] = None,
        notes: Optional[str] = None,
        *,
        today: Optional[date] = None,
    ) -> InvoiceView:
        amount_cents = parse_positive_amount(amount)
        payment_method = parse_method(method)
        invoice = self._require_invoice(teacher_id, invoice_id)
        today = today or date.today()

        with self._tx.transaction():
            reference = self._references.next(PAYMENT_PREFIX, today=today)
            payment_id = self._payments.insert(
                invoice_id=invoice.invoice_id,
                student_id=invoice.student_id,
                payment_reference=reference,
                amount_cents=amount_cents,
                payment_date=today,
                payment_method=payment_method,
                notes=(notes or "").strip() or None,
            )
            paid = self._paid(invoice.invoice_id)
            status = status_after_payment(invoice.status, paid_cents=paid, total_cents=invoice.total_cents)
            if status != invoice.status:
                self._invoices.set_status(invoice_id=invoice.invoice_id, status=status)

        _logger.info(
            "payment recorded",
            extra={
                "invoice_id": invoice.invoice_id,
                "payment_id": payment_id,
                "payment_reference": reference,
                "status": status.value,
            },
        )
        return InvoiceView(invoice=self._require_invoice(teacher_id, invoice_id), paid_cents=paid)

    def undo_last_payment(self, teacher_id: int, invoice_id: int) -> InvoiceView:
        invoice = self._require_invoice(teacher_id, invoice_id)

        with self._tx.transaction():
            last = self._payments.latest_for_invoice(invoice.invoice_id)
            if not last:
                raise NotFoundError("No payments found for this invoice")
            self._payments.delete(last.payment_id)
            paid = self._paid(invoice.invoice_id)
            status = status_after_undo(invoice.status, paid_cents=paid, total_cents=invoice.total_cents)
            if status != invoice.status:
                self._invoices.set_status(invoice_id=invoice.invoice_id, status=status)

        _logger.info(
            "payment undone",
            extra={"invoice_id": invoice.invoice_id, "payment_id": last.payment_id, "status": status.value},
        )
        return InvoiceView(invoice=self._require_invoice(teacher_id, invoice_id), paid_cents=paid)
