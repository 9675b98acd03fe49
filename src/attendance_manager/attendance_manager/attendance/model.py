from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..students.model import Student


@dataclass(frozen=True)
class AttendanceRecord:
    """Whether one student attended one scheduled lesson."""

    record_id: int
    lesson_schedule_id: int
    student_id: int
    attended: bool
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None
    recorded_by: Optional[int] = None


@dataclass(frozen=True)
class GridRow:
    """One student's marks as posted by the grid, keyed by column."""

    student_id: int
    marks: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class AttendanceGrid:
    month: date
    dates: Sequence[date]
    students: Sequence[Student]
    attended: frozenset[tuple[int, date]] = frozenset()

    def is_attended(self, student_id: int, day: date) -> bool:
        return (int(student_id), day) in self.attended
