from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ...schedules.model import LessonSchedule


class BillingCalculator(ABC):
    """Calculator interface (Strategy Pattern for monthly billing)."""

    @abstractmethod
    def unit_rate(
        self,
        *,
        manual_cents: Optional[int],
        schedules: Sequence[LessonSchedule],
        class_rate_cents: Optional[int],
    ) -> int:
        raise NotImplementedError

    def subtotal(self, *, attended: int, unit_cents: int) -> int:
        return int(attended) * int(unit_cents)
