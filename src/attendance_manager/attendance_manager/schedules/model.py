from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class LessonSchedule:
    """A planned session for one student in one class on one day.

    The row doubles as proof that the student belongs to the class.
    """

    schedule_id: int
    class_id: int
    student_id: int
    lesson_date: date
    duration_minutes: Optional[int] = None
    hourly_rate_cents: Optional[int] = None
