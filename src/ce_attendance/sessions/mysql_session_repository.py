from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import ClassSession
from .repository import SessionRepository

_COLUMNS = """
    session_id, title, starts_at, ends_at, checkin_code, checkout_code,
    checkin_expires_at, checkout_expires_at
"""


def _to_session(r: Dict[str, Any]) -> ClassSession:
    return ClassSession(
        session_id=str(r["session_id"]),
        title=r["title"],
        starts_at=from_db_datetime(r["starts_at"]),
        ends_at=from_db_datetime(r["ends_at"]),
        checkin_code=r["checkin_code"],
        checkout_code=r["checkout_code"],
        checkin_expires_at=from_db_datetime(r.get("checkin_expires_at")),
        checkout_expires_at=from_db_datetime(r.get("checkout_expires_at")),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: str) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_sessions WHERE session_id=%s", (session_id,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_active(self, *, now: datetime) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM class_sessions
                WHERE ends_at >= %s
                ORDER BY starts_at ASC
                """,
                (to_db_datetime(now),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def create(self, session: ClassSession) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_sessions(
                    session_id, title, starts_at, ends_at, checkin_code, checkout_code,
                    checkin_expires_at, checkout_expires_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    session.session_id,
                    session.title,
                    to_db_datetime(session.starts_at),
                    to_db_datetime(session.ends_at),
                    session.checkin_code,
                    session.checkout_code,
                    to_db_datetime(session.checkin_expires_at),
                    to_db_datetime(session.checkout_expires_at),
                ),
            )
            return session.session_id
