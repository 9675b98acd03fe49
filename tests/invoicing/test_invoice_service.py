from datetime import date, datetime
from urllib.parse import unquote

import pytest

from src.attendance_manager.attendance_manager.core.enums import InvoiceStatus
from src.attendance_manager.attendance_manager.core.exceptions import NotFoundError, StoreError, ValidationError
from tests.fakes import World

JULY = date(2025, 7, 1)
TODAY = date(2025, 8, 1)


def _math_a(parent_email="parent@example.com", lesson_rate=None):
    """Math A at $20.00; S1 scheduled four times in July, attended three."""
    w = World()
    teacher = w.teacher()
    class_id = w.classes.create(teacher_id=teacher, class_name="Math A", hourly_rate_cents=2000)
    student_id = w.students.create(teacher_id=teacher, student_name="S1", parent_email=parent_email)
    for i, (day, attended) in enumerate([(3, True), (10, True), (17, False), (24, True)]):
        sid = w.schedules.add(
            class_id=class_id,
            student_id=student_id,
            lesson_date=date(2025, 7, day),
            hourly_rate_cents=lesson_rate if i == 1 else None,
        )
        w.container.reconciler.record(teacher, sid, student_id, attended, now=datetime(2025, 7, day, 10))
    return w, teacher, class_id, student_id


def test_summary_for_math_a():
    w, teacher, class_id, student_id = _math_a()
    s = w.container.summary_service.compute(teacher, class_id, student_id, JULY)
    assert (s.attended, s.total, s.unit_cents, s.subtotal_cents) == (3, 4, 2000, 6000)


def test_per_lesson_rate_overrides_the_class_rate():
    w, teacher, class_id, student_id = _math_a(lesson_rate=2500)
    s = w.container.summary_service.compute(teacher, class_id, student_id, JULY)
    assert s.unit_cents == 2500
    assert s.subtotal_cents == 7500


def test_manual_rate_overrides_everything_and_garbage_is_ignored():
    w, teacher, class_id, student_id = _math_a(lesson_rate=2500)
    assert w.container.summary_service.compute(teacher, class_id, student_id, JULY, "30").unit_cents == 3000
    assert w.container.summary_service.compute(teacher, class_id, student_id, JULY, "abc").unit_cents == 2500


def test_other_months_are_not_counted():
    w, teacher, class_id, student_id = _math_a()
    w.schedules.add(class_id=class_id, student_id=student_id, lesson_date=date(2025, 8, 1))
    s = w.container.summary_service.compute(teacher, class_id, student_id, date(2025, 8, 1))
    assert (s.attended, s.total, s.subtotal_cents) == (0, 1, 0)


def test_generate_saves_draft_with_one_line_item():
    w, teacher, class_id, student_id = _math_a()

    invoice = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=TODAY)

    assert invoice.invoice_number == "INV-2025-0001"
    assert invoice.status == InvoiceStatus.DRAFT
    assert invoice.total_cents == 6000
    assert invoice.tax_cents == 0
    assert invoice.due_date == date(2025, 8, 15)
    assert invoice.notes == "Invoice for 2025-07 - 3/4 sessions attended"
    (item,) = w.invoices.list_line_items(invoice.invoice_id)
    assert item.description == "Math A - July 2025"
    assert (item.quantity, item.unit_price_cents, item.total_price_cents) == (3, 2000, 6000)


def test_invoice_numbers_increase():
    w, teacher, class_id, student_id = _math_a()
    first = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=TODAY)
    second = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=TODAY)
    assert (first.invoice_number, second.invoice_number) == ("INV-2025-0001", "INV-2025-0002")


def test_email_parent_builds_mailto_and_marks_sent():
    w, teacher, class_id, student_id = _math_a()

    draft = w.container.invoice_service.email_parent(teacher, class_id, student_id, JULY, today=TODAY)

    assert draft.to == "parent@example.com"
    assert draft.subject == "Invoice INV-2025-0001 · July 2025"
    assert "Sessions attended: 3" in draft.body
    assert "Rate per session: $20.00" in draft.body
    assert "Total: $60.00" in draft.body
    assert "Ms. Rivera" in draft.body
    assert draft.mailto.startswith("mailto:parent@example.com?subject=")
    assert unquote(draft.mailto.split("body=", 1)[1]) == draft.body
    assert draft.invoice.status == InvoiceStatus.SENT


def test_email_parent_without_address_saves_nothing():
    w, teacher, class_id, student_id = _math_a(parent_email=None)
    with pytest.raises(ValidationError, match="No parent email on file"):
        w.container.invoice_service.email_parent(teacher, class_id, student_id, JULY, today=TODAY)
    assert w.invoices.rows == {}


def test_list_is_newest_first_with_ledger_figures():
    w, teacher, class_id, student_id = _math_a()
    old = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=date(2025, 8, 1))
    new = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=date(2025, 8, 2))
    w.container.payment_ledger.record_payment(teacher, old.invoice_id, "10", today=date(2025, 8, 3))

    views = w.container.invoice_service.list_invoices(teacher)

    assert [v.invoice.invoice_id for v in views] == [new.invoice_id, old.invoice_id]
    assert views[1].paid_cents == 1000
    assert views[1].due_cents == 5000
    assert views[1].invoice.student_name == "S1"


def test_delete_cascades_to_the_ledger():
    w, teacher, class_id, student_id = _math_a()
    inv = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=TODAY)
    w.container.payment_ledger.record_payment(teacher, inv.invoice_id, "10", today=TODAY)
    w.container.payment_ledger.record_payment(teacher, inv.invoice_id, "15", today=TODAY)
    assert len(w.payments.list_for_invoice(inv.invoice_id)) == 2

    w.container.invoice_service.delete_invoice(teacher, inv.invoice_id)

    assert w.payments.paid_totals([inv.invoice_id]) == {inv.invoice_id: 0}
    assert list(w.payments.list_for_invoice(inv.invoice_id)) == []
    assert w.invoices.list_line_items(inv.invoice_id) == []
    with pytest.raises(NotFoundError):
        w.container.invoice_service.delete_invoice(teacher, inv.invoice_id)


def test_bulk_delete_only_touches_own_invoices():
    w, teacher, class_id, student_id = _math_a()
    a = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=TODAY)
    b = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=TODAY)
    intruder = w.teacher(email="i@example.com")

    with pytest.raises(NotFoundError):
        w.container.invoice_service.bulk_delete(intruder, [a.invoice_id, b.invoice_id])
    assert w.container.invoice_service.bulk_delete(teacher, [a.invoice_id, b.invoice_id, a.invoice_id]) == 2
    assert w.invoices.rows == {}


def test_detail_lists_items_and_payments():
    w, teacher, class_id, student_id = _math_a()
    inv = w.container.invoice_service.generate(teacher, class_id, student_id, JULY, today=TODAY)
    w.container.payment_ledger.record_payment(teacher, inv.invoice_id, "15.50", "card", today=TODAY)

    detail = w.container.invoice_service.invoice_detail(teacher, inv.invoice_id)

    assert len(detail.line_items) == 1
    assert [p.amount_cents for p in detail.payments] == [1550]
    assert detail.view.effective_status == InvoiceStatus.SENT


def test_oversized_manual_rate_falls_back_to_the_class_rate():
    w, teacher, class_id, student_id = _math_a()
    s = w.container.summary_service.compute(teacher, class_id, student_id, JULY, "1e40")
    assert s.unit_cents == 2000


def test_email_parent_saves_nothing_when_marking_sent_fails():
    w, teacher, class_id, student_id = _math_a()

    def broken_set_status(**kwargs):
        raise StoreError("store down")

    w.invoices.set_status = broken_set_status

    with pytest.raises(StoreError):
        w.container.invoice_service.email_parent(teacher, class_id, student_id, JULY, today=TODAY)
    assert w.invoices.rows == {}
    assert w.counters.values == {}


def test_email_body_quotes_the_saved_line_item():
    w, teacher, class_id, student_id = _math_a()

    draft = w.container.invoice_service.email_parent(teacher, class_id, student_id, JULY, "25", today=TODAY)

    (item,) = w.invoices.list_line_items(draft.invoice.invoice_id)
    assert f"Sessions attended: {item.quantity}" in draft.body
    assert "Rate per session: $25.00" in draft.body
    assert draft.invoice.total_cents == item.total_price_cents == 7500
