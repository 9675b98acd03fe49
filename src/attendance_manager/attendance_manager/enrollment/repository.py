from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Protocol


class EnrollmentRepository(Protocol):
    def enroll(self, *, class_id: int, student_id: int, joined_on: date) -> None:
        """Idempotent: enrolling twice keeps the first joined_on."""

        raise NotImplementedError

    def unenroll(self, *, class_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def student_ids_by_class(self, *, class_ids: Iterable[int]) -> Mapping[int, set[int]]:
        raise NotImplementedError
