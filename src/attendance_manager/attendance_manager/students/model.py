from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import PaymentStatus


@dataclass(frozen=True)
class Student:
    """Domain entity: a billable person.

    Students are not linked to classes directly; see the enrollment module.
    """

    student_id: int
    teacher_id: int
    student_name: str
    parent_email: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    invoice_amount_cents: Optional[int] = None
    last_payment_date: Optional[date] = None
