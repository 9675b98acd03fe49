from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Profile:
    """Domain entity: the teacher who owns every other row.

    Note: Plain data object (no DB access code).
    """

    profile_id: int
    email: str
    password_hash: str
    full_name: Optional[str] = None
    school_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
