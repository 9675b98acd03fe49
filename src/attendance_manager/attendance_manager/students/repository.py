from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import PaymentStatus
from .model import Student


class StudentRepository(Protocol):
    def list_for_teacher(self, teacher_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_ids(self, *, teacher_id: int, student_ids: Iterable[int]) -> Sequence[Student]:
        """Students among ``student_ids`` owned by the teacher, ordered by name."""

        raise NotImplementedError

    def get(self, *, teacher_id: int, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: int,
        student_name: str,
        parent_email: Optional[str],
        payment_status: PaymentStatus,
        invoice_amount_cents: Optional[int],
        last_payment_date: Optional[date],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        teacher_id: int,
        student_id: int,
        student_name: str,
        parent_email: Optional[str],
        payment_status: PaymentStatus,
        invoice_amount_cents: Optional[int],
        last_payment_date: Optional[date],
    ) -> bool:
        raise NotImplementedError

    def delete(self, *, teacher_id: int, student_id: int) -> bool:
        raise NotImplementedError
