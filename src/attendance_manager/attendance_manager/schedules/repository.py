from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .model import LessonSchedule


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[LessonSchedule]:
        raise NotImplementedError

    def ensure(self, *, class_id: int, student_id: int, lesson_date: date) -> int:
        """Return the schedule id for the triple, creating the row if needed.

        Must be idempotent: a second call for the same triple returns the same id
        and never adds a row.
        """

        raise NotImplementedError

    def list_for_class(self, *, class_id: int, start: date, end: date) -> Sequence[LessonSchedule]:
        """Rows with ``start <= lesson_date < end``, ordered by date."""

        raise NotImplementedError

    def list_for_student(
        self, *, class_id: int, student_id: int, start: date, end: date
    ) -> Sequence[LessonSchedule]:
        """Rows with ``start <= lesson_date < end``, ordered by date."""

        raise NotImplementedError

    def student_ids_by_class(self, *, class_ids: Iterable[int]) -> Mapping[int, set[int]]:
        """Distinct student ids having at least one row, per class."""

        raise NotImplementedError

    def delete_for_student(self, *, class_id: int, student_id: int) -> int:
        raise NotImplementedError
