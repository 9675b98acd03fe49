from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..classes.repository import ClassRepository
from ..common.datetime_utils import month_bounds
from ..common.logging_setup import get_logger
from ..common.ownership import require_class, require_student
from ..database.transactions import NoTransaction, TransactionManager
from ..students.repository import StudentRepository
from .repository import ScheduleRepository

_logger = get_logger(__name__)


class ScheduleMaterializer:
    """Make sure lesson-schedule rows exist for (class, student, date)."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        classes: ClassRepository,
        students: StudentRepository,
        *,
        tx: Optional[TransactionManager] = None,
    ):
        self._schedules = schedules
        self._classes = classes
        self._students = students
        self._tx = tx or NoTransaction()

    def materialize(self, teacher_id: int, class_id: int, student_id: int, dates: Iterable[date]) -> list[int]:
        """Ensure one row per date; return schedule ids in date order.

        Dates are taken as given: callers decide which month they belong to.
        """
        require_class(self._classes, teacher_id, class_id)
        require_student(self._students, teacher_id, student_id)

        unique_dates = sorted(set(dates))
        with self._tx.transaction():
            ids = [
                self._schedules.ensure(class_id=int(class_id), student_id=int(student_id), lesson_date=d)
                for d in unique_dates
            ]

        _logger.info(
            "schedules materialized",
            extra={"class_id": int(class_id), "student_id": int(student_id), "count": len(ids)},
        )
        return ids

    def planned_dates(self, teacher_id: int, class_id: int, month: date) -> list[date]:
        """Distinct scheduled days of the class in a month, ascending."""
        require_class(self._classes, teacher_id, class_id)
        start, end = month_bounds(month)
        rows = self._schedules.list_for_class(class_id=int(class_id), start=start, end=end)
        return sorted({r.lesson_date for r in rows})
