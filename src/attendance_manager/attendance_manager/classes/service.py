from __future__ import annotations

from typing import Optional

from ..common.logging_setup import get_logger
from ..common.money import to_cents
from ..common.ownership import require_class
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..enrollment.service import EnrollmentResolver
from .model import ClassSummary, TeachingClass
from .repository import ClassRepository

_logger = get_logger(__name__)


def _parse_rate(value) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    cents = to_cents(value)
    if cents < 0:
        raise ValidationError("Hourly rate cannot be negative")
    return cents


class ClassService:
    def __init__(self, classes: ClassRepository, enrollment: EnrollmentResolver):
        self._classes = classes
        self._enrollment = enrollment

    def list_with_counts(self, teacher_id: int) -> list[ClassSummary]:
        classes = list(self._classes.list_for_teacher(int(teacher_id)))
        counts = self._enrollment.student_counts([c.class_id for c in classes])
        return [ClassSummary(teaching_class=c, student_count=counts.get(c.class_id, 0)) for c in classes]

    def get(self, teacher_id: int, class_id: int) -> TeachingClass:
        return require_class(self._classes, teacher_id, class_id)

    def create(self, teacher_id: int, *, class_name: str, subject: Optional[str] = None, hourly_rate=None) -> int:
        name = require_non_empty(class_name, "Class name")
        class_id = self._classes.create(
            teacher_id=int(teacher_id),
            class_name=name,
            subject=(subject or "").strip() or None,
            hourly_rate_cents=_parse_rate(hourly_rate),
        )
        _logger.info("class created", extra={"teacher_id": int(teacher_id), "class_id": class_id})
        return class_id

    def update(
        self,
        teacher_id: int,
        class_id: int,
        *,
        class_name: str,
        subject: Optional[str] = None,
        hourly_rate=None,
    ) -> TeachingClass:
        require_class(self._classes, teacher_id, class_id)
        self._classes.update(
            teacher_id=int(teacher_id),
            class_id=int(class_id),
            class_name=require_non_empty(class_name, "Class name"),
            subject=(subject or "").strip() or None,
            hourly_rate_cents=_parse_rate(hourly_rate),
        )
        return require_class(self._classes, teacher_id, class_id)

    def delete(self, teacher_id: int, class_id: int) -> None:
        """Schedules, attendance and enrollments of the class cascade in the store."""
        if not self._classes.delete(teacher_id=int(teacher_id), class_id=int(class_id)):
            raise NotFoundError("Class not found")
        _logger.info("class deleted", extra={"teacher_id": int(teacher_id), "class_id": int(class_id)})
