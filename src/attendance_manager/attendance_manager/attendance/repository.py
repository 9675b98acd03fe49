from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def find(self, *, lesson_schedule_id: int, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        lesson_schedule_id: int,
        student_id: int,
        attended: bool,
        recorded_at: datetime,
        recorded_by: int,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(self, *, record_id: int, attended: bool, recorded_at: datetime, recorded_by: int) -> bool:
        raise NotImplementedError

    def list_for_schedules(
        self, *, schedule_ids: Iterable[int], student_id: Optional[int] = None
    ) -> Sequence[AttendanceRecord]:
        """Rows for the given schedules, optionally restricted to one student."""

        raise NotImplementedError
