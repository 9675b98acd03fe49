from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import days_in_month, month_bounds, month_start, now_local, resolve_date_key
from ..common.logging_setup import get_logger
from ..common.ownership import require_class, require_student
from ..core.exceptions import NotFoundError, ValidationError
from ..database.transactions import NoTransaction, TransactionManager
from ..enrollment.service import EnrollmentResolver
from ..schedules.repository import ScheduleRepository
from ..students.repository import StudentRepository
from .model import AttendanceGrid, GridRow
from .repository import AttendanceRepository

_logger = get_logger(__name__)


class AttendanceReconciler:
    """Record attendance as an upsert keyed by (schedule, student).

    Whatever was written last for a cell is what the cell holds.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        classes: ClassRepository,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._classes = classes

    def record(
        self,
        teacher_id: int,
        lesson_schedule_id: int,
        student_id: int,
        attended: bool,
        *,
        now: Optional[datetime] = None,
    ) -> bool:
        schedule = self._schedules.get_by_id(int(lesson_schedule_id))
        if not schedule:
            raise NotFoundError("Lesson not found")
        require_class(self._classes, teacher_id, schedule.class_id)
        if schedule.student_id != int(student_id):
            raise ValidationError("Lesson is scheduled for another student")

        return self.write(teacher_id, schedule.schedule_id, student_id, attended, now=now)

    def write(
        self,
        teacher_id: int,
        lesson_schedule_id: int,
        student_id: int,
        attended: bool,
        *,
        now: Optional[datetime] = None,
    ) -> bool:
        """Upsert without ownership checks; callers have done them."""
        now = now or now_local()
        existing = self._attendance.find(lesson_schedule_id=int(lesson_schedule_id), student_id=int(student_id))
        if existing:
            # rowcount is 0 when nothing changed, which still counts as written
            self._attendance.update(
                record_id=existing.record_id,
                attended=bool(attended),
                recorded_at=now,
                recorded_by=int(teacher_id),
            )
        else:
            self._attendance.create(
                lesson_schedule_id=int(lesson_schedule_id),
                student_id=int(student_id),
                attended=bool(attended),
                recorded_at=now,
                recorded_by=int(teacher_id),
            )
        return True


class AttendanceGridService:
    """The class-by-month attendance grid: students down, lesson days across."""

    def __init__(
        self,
        reconciler: AttendanceReconciler,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        classes: ClassRepository,
        students: StudentRepository,
        enrollment: EnrollmentResolver,
        *,
        tx: Optional[TransactionManager] = None,
    ):
        self._reconciler = reconciler
        self._attendance = attendance
        self._schedules = schedules
        self._classes = classes
        self._students = students
        self._enrollment = enrollment
        self._tx = tx or NoTransaction()

    def load(
        self,
        teacher_id: int,
        class_id: int,
        month: date,
        custom_dates: Optional[Iterable[date]] = None,
    ) -> AttendanceGrid:
        require_class(self._classes, teacher_id, class_id)
        month = month_start(month)
        start, end = month_bounds(month)

        schedules = self._schedules.list_for_class(class_id=int(class_id), start=start, end=end)
        by_id = {s.schedule_id: s for s in schedules}
        records = self._attendance.list_for_schedules(schedule_ids=by_id.keys())
        attended = frozenset(
            (r.student_id, by_id[r.lesson_schedule_id].lesson_date)
            for r in records
            if r.attended and r.lesson_schedule_id in by_id
        )

        custom = sorted(set(custom_dates or ()))
        if custom:
            dates: Sequence[date] = custom
        elif schedules:
            dates = sorted({s.lesson_date for s in schedules})
        else:
            dates = days_in_month(month)

        return AttendanceGrid(
            month=month,
            dates=dates,
            students=self._enrollment.enrolled_students(teacher_id, class_id),
            attended=attended,
        )

    def save(self, teacher_id: int, class_id: int, month: date, rows: Sequence[GridRow]) -> int:
        """Write every dated cell of ``rows``; return how many were written.

        Columns whose key is not a date are skipped. The whole grid is one
        transaction: a failure leaves neither schedules nor attendance behind.
        """
        require_class(self._classes, teacher_id, class_id)
        for sid in {int(r.student_id) for r in rows}:
            require_student(self._students, teacher_id, sid)

        cells: list[tuple[int, date, bool]] = []
        for row in rows:
            for key, value in row.marks.items():
                day = resolve_date_key(key, month)
                if day is not None:
                    cells.append((int(row.student_id), day, bool(value)))

        now = now_local()
        with self._tx.transaction():
            for student_id, day, value in cells:
                schedule_id = self._schedules.ensure(class_id=int(class_id), student_id=student_id, lesson_date=day)
                self._reconciler.write(teacher_id, schedule_id, student_id, value, now=now)

        _logger.info(
            "attendance grid saved",
            extra={"teacher_id": int(teacher_id), "class_id": int(class_id), "cells": len(cells)},
        )
        return len(cells)
