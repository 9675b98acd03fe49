from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.logging_setup import get_logger
from ..common.validators import optional_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import Profile
from .repository import ProfileRepository

_logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionTeacher:
    """What we store into Flask session after login."""

    teacher_id: int
    email: str
    display_name: str


class AuthService:
    """Use case: sign up and sign in a teacher."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def register(self, *, email: str, password: str, full_name: Optional[str] = None) -> SessionTeacher:
        email = optional_email(require_non_empty(email, "Email"))
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._profiles.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        # New profiles fall back to the email as display name.
        name = (full_name or "").strip() or email
        profile_id = self._profiles.create(
            email=email,
            password_hash=generate_password_hash(password),
            full_name=name,
        )
        _logger.info("profile created", extra={"teacher_id": profile_id})
        return SessionTeacher(teacher_id=profile_id, email=email, display_name=name)

    def authenticate(self, email: str, password: str) -> SessionTeacher:
        profile = self._profiles.get_by_email((email or "").strip())
        if not profile:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(profile.password_hash, password or "")
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionTeacher(
            teacher_id=profile.profile_id,
            email=profile.email,
            display_name=profile.display_name,
        )


class ProfileService:
    """Use case: read/update the teacher heading used on invoices."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def get(self, teacher_id: int) -> Profile:
        profile = self._profiles.get_by_id(int(teacher_id))
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def update(self, teacher_id: int, *, full_name: Optional[str], school_name: Optional[str]) -> Profile:
        self.get(teacher_id)
        self._profiles.update(
            profile_id=int(teacher_id),
            full_name=(full_name or "").strip() or None,
            school_name=(school_name or "").strip() or None,
        )
        return self.get(teacher_id)
