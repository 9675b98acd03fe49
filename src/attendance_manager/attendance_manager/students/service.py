from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..common.logging_setup import get_logger
from ..common.money import to_cents_or_none
from ..common.ownership import require_student
from ..common.validators import optional_email, require_non_empty
from ..core.enums import PaymentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..enrollment.service import EnrollmentResolver
from ..schedules.service import ScheduleMaterializer
from .model import Student
from .repository import StudentRepository

_logger = get_logger(__name__)


@dataclass(frozen=True)
class NewStudent:
    student_name: str
    parent_email: Optional[str] = None
    payment_status: str = PaymentStatus.PENDING.value
    invoice_amount: Optional[str] = None


def _parse_status(value: Optional[str]) -> PaymentStatus:
    try:
        return PaymentStatus((value or PaymentStatus.PENDING.value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown payment status: {value!r}")


class StudentService:
    def __init__(
        self,
        students: StudentRepository,
        enrollment: EnrollmentResolver,
        materializer: ScheduleMaterializer,
    ):
        self._students = students
        self._enrollment = enrollment
        self._materializer = materializer

    def list(self, teacher_id: int) -> Sequence[Student]:
        return self._students.list_for_teacher(int(teacher_id))

    def create(
        self,
        teacher_id: int,
        data: NewStudent,
        *,
        class_id: Optional[int] = None,
        planned_dates: Sequence[date] = (),
        today: Optional[date] = None,
    ) -> int:
        """Create a student; with a class, enroll them and plan the given dates."""
        today = today or date.today()
        name = require_non_empty(data.student_name, "Student name")
        email = optional_email(data.parent_email, "Parent email")
        status = _parse_status(data.payment_status)

        student_id = self._students.create(
            teacher_id=int(teacher_id),
            student_name=name,
            parent_email=email,
            payment_status=status,
            invoice_amount_cents=to_cents_or_none(data.invoice_amount),
            last_payment_date=today if status == PaymentStatus.PAID else None,
        )
        _logger.info("student created", extra={"teacher_id": int(teacher_id), "student_id": student_id})

        if class_id:
            self._enrollment.enroll(teacher_id, class_id, student_id, today=today)
            if planned_dates:
                self._materializer.materialize(teacher_id, class_id, student_id, planned_dates)

        return student_id

    def update(
        self,
        teacher_id: int,
        student_id: int,
        *,
        student_name: Optional[str] = None,
        parent_email: Optional[str] = None,
        payment_status: Optional[str] = None,
        invoice_amount: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Student:
        """Partial update: fields left as None keep their current value."""
        current = require_student(self._students, teacher_id, student_id)

        status = current.payment_status if payment_status is None else _parse_status(payment_status)
        last_paid = current.last_payment_date
        if status == PaymentStatus.PAID and current.payment_status != PaymentStatus.PAID:
            last_paid = today or date.today()

        self._students.update(
            teacher_id=int(teacher_id),
            student_id=int(student_id),
            student_name=current.student_name if student_name is None else require_non_empty(student_name, "Student name"),
            parent_email=current.parent_email if parent_email is None else optional_email(parent_email, "Parent email"),
            payment_status=status,
            invoice_amount_cents=current.invoice_amount_cents if invoice_amount is None else to_cents_or_none(invoice_amount),
            last_payment_date=last_paid,
        )
        return require_student(self._students, teacher_id, student_id)

    def remove(self, teacher_id: int, student_id: int) -> None:
        if not self._students.delete(teacher_id=int(teacher_id), student_id=int(student_id)):
            raise NotFoundError("Student not found")
        _logger.info("student removed", extra={"teacher_id": int(teacher_id), "student_id": int(student_id)})
