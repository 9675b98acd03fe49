from __future__ import annotations

from typing import Optional, Protocol

from .model import Profile


class ProfileRepository(Protocol):
    """Repository interface for teacher profiles.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Profile]:
        raise NotImplementedError

    def create(self, *, email: str, password_hash: str, full_name: Optional[str]) -> int:
        raise NotImplementedError

    def update(self, *, profile_id: int, full_name: Optional[str], school_name: Optional[str]) -> bool:
        raise NotImplementedError
