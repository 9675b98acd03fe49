import pytest

from src.attendance_manager.attendance_manager.core.enums import InvoiceStatus as S
from src.attendance_manager.attendance_manager.payments.status import (
    effective_status,
    status_after_payment,
    status_after_undo,
)


@pytest.mark.parametrize(
    "prior, paid, expected",
    [
        (S.DRAFT, 4000, S.SENT),
        (S.SENT, 4000, S.SENT),
        (S.OVERDUE, 4000, S.OVERDUE),
        (S.DRAFT, 10000, S.PAID),
        (S.SENT, 12000, S.PAID),
    ],
)
def test_status_after_payment(prior, paid, expected):
    assert status_after_payment(prior, paid_cents=paid, total_cents=10000) == expected


@pytest.mark.parametrize(
    "prior, paid, expected",
    [
        (S.PAID, 0, S.SENT),
        (S.SENT, 0, S.SENT),
        (S.DRAFT, 0, S.DRAFT),
        (S.PAID, 4000, S.SENT),
        (S.PAID, 10000, S.PAID),
        (S.OVERDUE, 4000, S.SENT),
    ],
)
def test_status_after_undo(prior, paid, expected):
    assert status_after_undo(prior, paid_cents=paid, total_cents=10000) == expected


def test_effective_status_follows_the_ledger():
    assert effective_status(S.SENT, paid_cents=10000, total_cents=10000) == S.PAID
    assert effective_status(S.PAID, paid_cents=0, total_cents=10000) == S.SENT
    assert effective_status(S.CANCELLED, paid_cents=10000, total_cents=10000) == S.CANCELLED
    assert effective_status(S.DRAFT, paid_cents=0, total_cents=10000) == S.DRAFT
