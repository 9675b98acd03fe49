from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TeachingClass:
    """Domain entity: a named teaching group owned by one teacher."""

    class_id: int
    teacher_id: int
    class_name: str
    subject: Optional[str] = None
    hourly_rate_cents: Optional[int] = None


@dataclass(frozen=True)
class ClassSummary:
    """Read-model for the class list (with enrolled student count)."""

    teaching_class: TeachingClass
    student_count: int
