from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional, Sequence
from urllib.parse import quote

from ..attendance.repository import AttendanceRepository
from ..classes.model import TeachingClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import month_bounds, month_key, month_label, month_start
from ..common.logging_setup import get_logger
from ..common.money import format_cents, to_cents_or_none
from ..common.ownership import require_class, require_student
from ..core.constants import DEFAULT_INVOICE_DUE_DAYS, INVOICE_PREFIX
from ..core.enums import InvoiceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..database.transactions import NoTransaction, TransactionManager
from ..payments.repository import PaymentRepository
from ..profiles.repository import ProfileRepository
from ..references.service import ReferenceGenerator
from ..schedules.repository import ScheduleRepository
from ..students.repository import StudentRepository
from .calculator.base import BillingCalculator
from .calculator.standard_calculator import StandardBillingCalculator
from .model import Invoice, InvoiceDetail, InvoiceSummary, InvoiceView, MailDraft
from .repository import InvoiceRepository

_logger = get_logger(__name__)


class InvoiceSummaryService:
    """Monthly sessions and amount owed for one student in one class."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        students: StudentRepository,
        *,
        calculator: Optional[BillingCalculator] = None,
    ):
        self._schedules = schedules
        self._attendance = attendance
        self._classes = classes
        self._students = students
        self._calculator = calculator or StandardBillingCalculator()

    def compute(
        self,
        teacher_id: int,
        class_id: int,
        student_id: int,
        month: date,
        manual_rate=None,
    ) -> InvoiceSummary:
        """Count scheduled and attended lessons in ``month`` and price them.

        A manual rate that does not parse, or is not positive, is ignored.
        """
        cls = require_class(self._classes, teacher_id, class_id)
        require_student(self._students, teacher_id, student_id)

        start, end = month_bounds(month)
        schedules = self._schedules.list_for_student(
            class_id=int(class_id), student_id=int(student_id), start=start, end=end
        )
        records = self._attendance.list_for_schedules(
            schedule_ids=[s.schedule_id for s in schedules], student_id=int(student_id)
        )
        attended = sum(1 for r in records if r.attended)

        unit = self._calculator.unit_rate(
            manual_cents=to_cents_or_none(manual_rate),
            schedules=schedules,
            class_rate_cents=cls.hourly_rate_cents,
        )
        return InvoiceSummary(
            attended=attended,
            total=len(schedules),
            unit_cents=unit,
            subtotal_cents=self._calculator.subtotal(attended=attended, unit_cents=unit),
        )


class InvoiceService:
    def __init__(
        self,
        invoices: InvoiceRepository,
        payments: PaymentRepository,
        summaries: InvoiceSummaryService,
        references: ReferenceGenerator,
        classes: ClassRepository,
        students: StudentRepository,
        profiles: ProfileRepository,
        *,
        tx: Optional[TransactionManager] = None,
        due_days: int = DEFAULT_INVOICE_DUE_DAYS,
    ):
        self._invoices = invoices
        self._payments = payments
        self._summaries = summaries
        self._references = references
        self._classes = classes
        self._students = students
        self._profiles = profiles
        self._tx = tx or NoTransaction()
        self._due_days = int(due_days)

    def _require_invoice(self, teacher_id: int, invoice_id: int) -> Invoice:
        invoice = self._invoices.get(teacher_id=int(teacher_id), invoice_id=int(invoice_id))
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    def _save_draft(
        self,
        teacher_id: int,
        cls: TeachingClass,
        student_id: int,
        month: date,
        summary: InvoiceSummary,
        today: date,
    ) -> tuple[int, str]:
        """Insert the invoice row and its line item; the caller owns the transaction."""
        number = self._references.next(INVOICE_PREFIX, today=today)
        invoice_id = self._invoices.create(
            teacher_id=int(teacher_id),
            student_id=int(student_id),
            invoice_number=number,
            invoice_date=today,
            due_date=today + timedelta(days=self._due_days),
            total_cents=summary.subtotal_cents,
            tax_cents=0,
            status=InvoiceStatus.DRAFT,
            notes=f"Invoice for {month_key(month)} - {summary.attended}/{summary.total} sessions attended",
        )
        self._invoices.add_line_item(
            invoice_id=invoice_id,
            description=f"{cls.class_name} - {month_label(month)}",
            quantity=summary.attended,
            unit_price_cents=summary.unit_cents,
            total_price_cents=summary.subtotal_cents,
        )
        return invoice_id, number

    def generate(
        self,
        teacher_id: int,
        class_id: int,
        student_id: int,
        month: date,
        manual_rate=None,
        *,
        today: Optional[date] = None,
    ) -> Invoice:
        """Save a draft invoice for the month with one consolidated line item."""
        today = today or date.today()
        month = month_start(month)
        summary = self._summaries.compute(teacher_id, class_id, student_id, month, manual_rate)
        cls = require_class(self._classes, teacher_id, class_id)

        with self._tx.transaction():
            invoice_id, number = self._save_draft(teacher_id, cls, student_id, month, summary, today)

        _logger.info(
            "invoice generated",
            extra={"teacher_id": int(teacher_id), "invoice_id": invoice_id, "invoice_number": number},
        )
        return self._require_invoice(teacher_id, invoice_id)

    def email_parent(
        self,
        teacher_id: int,
        class_id: int,
        student_id: int,
        month: date,
        manual_rate=None,
        *,
        today: Optional[date] = None,
    ) -> MailDraft:
        """Save the invoice as sent and return a mail draft for the parent.

        The invoice row, its line item and the sent status commit together; the
        mail body quotes the figures that were saved.
        """
        today = today or date.today()
        student = require_student(self._students, teacher_id, student_id)
        if not student.parent_email:
            raise ValidationError("No parent email on file")

        month = month_start(month)
        summary = self._summaries.compute(teacher_id, class_id, student_id, month, manual_rate)
        cls = require_class(self._classes, teacher_id, class_id)
        profile = self._profiles.get_by_id(int(teacher_id))

        with self._tx.transaction():
            invoice_id, number = self._save_draft(teacher_id, cls, student_id, month, summary, today)
            self._invoices.set_status(invoice_id=invoice_id, status=InvoiceStatus.SENT)

        _logger.info(
            "invoice emailed",
            extra={"teacher_id": int(teacher_id), "invoice_id": invoice_id, "invoice_number": number},
        )

        label = month_label(month)
        subject = f"Invoice {number} · {label}"
        signature = [profile.display_name if profile else ""]
        if profile and profile.email:
            signature.append(f"Email: {profile.email}")
        body = "\n".join(
            [
                "Hello,",
                "",
                "Please find the invoice details below:",
                "",
                f"Student: {student.student_name}",
                f"Class: {cls.class_name}",
                f"Billing month: {label}",
                f"Sessions attended: {summary.attended}",
                f"Rate per session: ${format_cents(summary.unit_cents)}",
                f"Total: ${format_cents(summary.subtotal_cents)}",
                "",
                "Thank you!",
                *signature,
                "",
                "(Generated by Class Attendance Manager)",
            ]
        )
        mailto = (
            f"mailto:{quote(student.parent_email, safe='@')}"
            f"?subject={quote(subject, safe='')}&body={quote(body, safe='')}"
        )

        return MailDraft(
            invoice=self._require_invoice(teacher_id, invoice_id),
            to=student.parent_email,
            subject=subject,
            body=body,
            mailto=mailto,
        )

    def mark_sent(self, teacher_id: int, invoice_id: int) -> InvoiceView:
        invoice = self._require_invoice(teacher_id, invoice_id)
        self._invoices.set_status(invoice_id=invoice.invoice_id, status=InvoiceStatus.SENT)
        return self.view(teacher_id, invoice_id)

    def view(self, teacher_id: int, invoice_id: int) -> InvoiceView:
        invoice = self._require_invoice(teacher_id, invoice_id)
        paid = self._payments.paid_totals([invoice.invoice_id]).get(invoice.invoice_id, 0)
        return InvoiceView(invoice=invoice, paid_cents=paid)

    def list_invoices(self, teacher_id: int) -> list[InvoiceView]:
        invoices = list(self._invoices.list_for_teacher(int(teacher_id)))
        paid = self._payments.paid_totals([i.invoice_id for i in invoices])
        return [InvoiceView(invoice=i, paid_cents=paid.get(i.invoice_id, 0)) for i in invoices]

    def invoice_detail(self, teacher_id: int, invoice_id: int) -> InvoiceDetail:
        view = self.view(teacher_id, invoice_id)
        return InvoiceDetail(
            view=view,
            line_items=self._invoices.list_line_items(view.invoice.invoice_id),
            payments=self._payments.list_for_invoice(view.invoice.invoice_id),
        )

    def delete_invoice(self, teacher_id: int, invoice_id: int) -> None:
        """Line items and payments go with the invoice."""
        if not self._invoices.delete(teacher_id=int(teacher_id), invoice_ids=[int(invoice_id)]):
            raise NotFoundError("Invoice not found")
        _logger.info("invoice deleted", extra={"teacher_id": int(teacher_id), "invoice_id": int(invoice_id)})

    def bulk_delete(self, teacher_id: int, invoice_ids: Iterable[int]) -> int:
        ids: Sequence[int] = sorted({int(i) for i in invoice_ids})
        if not ids:
            raise ValidationError("No invoices selected")
        removed = self._invoices.delete(teacher_id=int(teacher_id), invoice_ids=ids)
        if not removed:
            raise NotFoundError("Invoice not found")
        _logger.info("invoices deleted", extra={"teacher_id": int(teacher_id), "count": removed})
        return removed
