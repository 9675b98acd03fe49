from __future__ import annotations

from typing import Protocol


class ReferenceCounterRepository(Protocol):
    def next_value(self, *, prefix: str, year: int) -> int:
        """Atomically bump and return the counter for (prefix, year), starting at 1."""

        raise NotImplementedError
