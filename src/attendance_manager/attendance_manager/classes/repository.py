from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TeachingClass


class ClassRepository(Protocol):
    def list_for_teacher(self, teacher_id: int) -> Sequence[TeachingClass]:
        """Classes ordered by name."""

        raise NotImplementedError

    def get(self, *, teacher_id: int, class_id: int) -> Optional[TeachingClass]:
        """None when the class is missing or belongs to another teacher."""

        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: int,
        class_name: str,
        subject: Optional[str],
        hourly_rate_cents: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        teacher_id: int,
        class_id: int,
        class_name: str,
        subject: Optional[str],
        hourly_rate_cents: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def delete(self, *, teacher_id: int, class_id: int) -> bool:
        raise NotImplementedError
