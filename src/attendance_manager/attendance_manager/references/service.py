from __future__ import annotations

import secrets
import string
from datetime import date
from typing import Optional

from ..common.logging_setup import get_logger
from ..core.constants import FALLBACK_SUFFIX_LENGTH, REFERENCE_DIGITS
from ..core.exceptions import StoreError
from .repository import ReferenceCounterRepository

_logger = get_logger(__name__)

_BASE36 = string.digits + string.ascii_uppercase


def format_reference(prefix: str, year: int, value: int) -> str:
    return f"{prefix}-{year}-{value:0{REFERENCE_DIGITS}d}"


def random_reference(prefix: str, year: int) -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(FALLBACK_SUFFIX_LENGTH))
    return f"{prefix}-{year}-{suffix}"


class ReferenceGenerator:
    """Human-readable sequential numbers such as ``INV-2025-0001``.

    The sequence lives in the store. When it cannot be reached a random
    six-character suffix is used instead; such a number is unique only with
    high probability, and the UNIQUE column on the target table rejects a
    clash.
    """

    def __init__(self, counters: ReferenceCounterRepository):
        self._counters = counters

    def next(self, prefix: str, *, today: Optional[date] = None) -> str:
        year = (today or date.today()).year
        try:
            value = self._counters.next_value(prefix=prefix, year=year)
        except StoreError as exc:
            reference = random_reference(prefix, year)
            _logger.warning(
                "reference sequence unavailable, using random suffix",
                extra={"prefix": prefix, "reference": reference, "error": str(exc)},
            )
            return reference
        return format_reference(prefix, year, value)
