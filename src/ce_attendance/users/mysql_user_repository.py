from __future__ import annotations

from typing import Any, Dict, Optional

from ..common.datetime_utils import now_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, to_db_datetime
from .model import Profile
from .repository import AdminDirectory, HeadshotRepository, UserRepository

_COLUMNS = "user_id, email, first_name, middle_initial, last_name, trec_license, password_hash"


def _to_profile(r: Dict[str, Any]) -> Profile:
    return Profile(
        user_id=str(r["user_id"]),
        email=r["email"],
        first_name=r["first_name"],
        middle_initial=r.get("middle_initial"),
        last_name=r["last_name"],
        trec_license=r["trec_license"],
        password_hash=r["password_hash"],
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, value: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE {column}=%s", (value,))
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        return self._get_one("user_id", user_id)

    def get_by_email(self, email: str) -> Optional[Profile]:
        return self._get_one("email", email)

    def get_by_trec_license(self, trec_license: str) -> Optional[Profile]:
        return self._get_one("trec_license", trec_license)

    def create(self, profile: Profile) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO profiles({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    profile.user_id,
                    profile.email,
                    profile.first_name,
                    profile.middle_initial,
                    profile.last_name,
                    profile.trec_license,
                    profile.password_hash,
                ),
            )
            return profile.user_id


class MySQLAdminDirectory(AdminDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_admin(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM admins WHERE user_id=%s", (user_id,))
            return fetchone(cur) is not None


class MySQLHeadshotRepository(HeadshotRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_path(self, trec_license: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT headshot_path FROM headshots_map WHERE trec_license=%s", (trec_license,))
            r = fetchone(cur)
            return r["headshot_path"] if r else None

    def upsert(self, *, trec_license: str, headshot_path: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO headshots_map(trec_license, headshot_path, updated_at)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE headshot_path=VALUES(headshot_path), updated_at=VALUES(updated_at)
                """,
                (trec_license, headshot_path, to_db_datetime(now_utc())),
            )
