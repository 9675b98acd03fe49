from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import PaymentMethod


@dataclass(frozen=True)
class Payment:
    """One ledger entry against an invoice."""

    payment_id: int
    payment_reference: str
    invoice_id: int
    student_id: int
    amount_cents: int
    payment_date: date
    payment_method: PaymentMethod
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
