from __future__ import annotations

from typing import Optional, Sequence

from .base import BillingCalculator
from ...schedules.model import LessonSchedule


class StandardBillingCalculator(BillingCalculator):
    """Standard rule: manual rate, else first per-lesson rate, else class rate, else 0.

    Only positive values count at every step; ``schedules`` must be in date order.
    """

    def unit_rate(
        self,
        *,
        manual_cents: Optional[int],
        schedules: Sequence[LessonSchedule],
        class_rate_cents: Optional[int],
    ) -> int:
        if manual_cents and manual_cents > 0:
            return int(manual_cents)

        for s in schedules:
            if s.hourly_rate_cents and s.hourly_rate_cents > 0:
                return int(s.hourly_rate_cents)

        if class_rate_cents and class_rate_cents > 0:
            return int(class_rate_cents)
        return 0
