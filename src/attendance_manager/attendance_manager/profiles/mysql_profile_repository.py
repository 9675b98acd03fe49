from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Profile
from .repository import ProfileRepository

_COLUMNS = "id, email, password_hash, full_name, school_name"


def _to_profile(row: dict) -> Profile:
    return Profile(
        profile_id=int(row["id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        full_name=row.get("full_name"),
        school_name=row.get("school_name"),
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE id=%s", (int(profile_id),))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def get_by_email(self, email: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def create(self, *, email: str, password_hash: str, full_name: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO profiles(email, password_hash, full_name)
                VALUES(%s,%s,%s)
                """,
                (email, password_hash, full_name),
            )
            return int(cur.lastrowid)

    def update(self, *, profile_id: int, full_name: Optional[str], school_name: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE profiles SET full_name=%s, school_name=%s WHERE id=%s",
                (full_name, school_name, int(profile_id)),
            )
            return cur.rowcount > 0
