from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.logging_setup import get_logger
from ..common.ownership import require_class, require_student
from ..database.transactions import NoTransaction, TransactionManager
from ..schedules.repository import ScheduleRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from .repository import EnrollmentRepository

_logger = get_logger(__name__)


class EnrollmentResolver:
    """Who belongs to a class.

    A student is enrolled when at least one lesson is scheduled for them in the
    class, or when they were enrolled explicitly (a student added to a class
    before any lesson date was planned).
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        enrollments: EnrollmentRepository,
        classes: ClassRepository,
        students: StudentRepository,
        *,
        tx: Optional[TransactionManager] = None,
    ):
        self._schedules = schedules
        self._enrollments = enrollments
        self._classes = classes
        self._students = students
        self._tx = tx or NoTransaction()

    def _ids_by_class(self, class_ids: Iterable[int]) -> dict[int, set[int]]:
        ids = [int(i) for i in class_ids]
        scheduled = self._schedules.student_ids_by_class(class_ids=ids)
        explicit = self._enrollments.student_ids_by_class(class_ids=ids)
        return {i: set(scheduled.get(i, ())) | set(explicit.get(i, ())) for i in ids}

    def enrolled_student_ids(self, teacher_id: int, class_id: int) -> set[int]:
        require_class(self._classes, teacher_id, class_id)
        return self._ids_by_class([class_id])[int(class_id)]

    def enrolled_students(self, teacher_id: int, class_id: int) -> Sequence[Student]:
        ids = self.enrolled_student_ids(teacher_id, class_id)
        if not ids:
            return []
        return self._students.list_by_ids(teacher_id=int(teacher_id), student_ids=ids)

    def student_counts(self, class_ids: Iterable[int]) -> dict[int, int]:
        """Per-class enrolled counts; callers pass only classes they own."""
        return {cid: len(sids) for cid, sids in self._ids_by_class(class_ids).items()}

    def enroll(self, teacher_id: int, class_id: int, student_id: int, *, today: Optional[date] = None) -> None:
        require_class(self._classes, teacher_id, class_id)
        require_student(self._students, teacher_id, student_id)
        self._enrollments.enroll(
            class_id=int(class_id),
            student_id=int(student_id),
            joined_on=today or date.today(),
        )
        _logger.info("student enrolled", extra={"class_id": int(class_id), "student_id": int(student_id)})

    def unenroll(self, teacher_id: int, class_id: int, student_id: int) -> None:
        """Remove membership; scheduled lessons go too since they imply it."""
        require_class(self._classes, teacher_id, class_id)
        require_student(self._students, teacher_id, student_id)
        with self._tx.transaction():
            self._enrollments.unenroll(class_id=int(class_id), student_id=int(student_id))
            removed = self._schedules.delete_for_student(class_id=int(class_id), student_id=int(student_id))
        _logger.info(
            "student unenrolled",
            extra={"class_id": int(class_id), "student_id": int(student_id), "schedules_removed": removed},
        )
