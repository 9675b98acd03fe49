from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional

from ..core.constants import MONTH_OPTIONS_AFTER, MONTH_OPTIONS_BEFORE
from ..core.exceptions import ValidationError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SHORT_DAY = re.compile(r"^([A-Za-z]{3})\s(\d{2})$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Bad date: {value!r}")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_month(value: str) -> date:
    """Parse a billing month into the first day of that month.

    Accepts ``YYYY-MM`` (invoice screens), ``Jul 2025`` and ``July 2025``
    (attendance grid).
    """
    v = (value or "").strip()
    for fmt in ("%Y-%m", "%b %Y", "%B %Y"):
        try:
            return datetime.strptime(v, fmt).date().replace(day=1)
        except ValueError:
            continue
    raise ValidationError(f"Bad month: {value!r}")


def month_start(day: date) -> date:
    return day.replace(day=1)


def next_month(month: date) -> date:
    if month.month == 12:
        return date(month.year + 1, 1, 1)
    return date(month.year, month.month + 1, 1)


def add_months(month: date, delta: int) -> date:
    index = month.year * 12 + (month.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def month_bounds(month: date) -> tuple[date, date]:
    """Half-open range [first day, first day of next month)."""
    start = month_start(month)
    return start, next_month(start)


def days_in_month(month: date) -> list[date]:
    start, end = month_bounds(month)
    return [start + timedelta(days=i) for i in range((end - start).days)]


def month_key(month: date) -> str:
    return month.strftime("%Y-%m")


def month_label(month: date) -> str:
    """Long label used on invoices, e.g. ``July 2025``."""
    return month.strftime("%B %Y")


def month_options(today: date) -> list[dict]:
    current = month_start(today)
    out: list[dict] = []
    for delta in range(-MONTH_OPTIONS_BEFORE, MONTH_OPTIONS_AFTER + 1):
        m = add_months(current, delta)
        out.append({"value": month_key(m), "label": m.strftime("%b %Y")})
    return out


def resolve_date_key(key: str, month: date) -> Optional[date]:
    """Turn an attendance grid column key into a date.

    Grid columns are keyed either ``YYYY-MM-DD`` or ``Mon DD``; the short form
    carries no year, so it is read in the year of the selected month. Keys of
    any other shape (``student_id``, ``student_name``...) return ``None``.
    """
    k = (key or "").strip()
    if _ISO_DATE.match(k):
        return parse_iso_date(k)

    m = _SHORT_DAY.match(k)
    if not m:
        return None
    try:
        return datetime.strptime(f"{m.group(1)} {m.group(2)} {month.year}", "%b %d %Y").date()
    except ValueError:
        raise ValidationError(f"Bad date: {key!r}")
