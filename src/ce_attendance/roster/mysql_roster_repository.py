from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import RosterRepository


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_on_roster(self, session_id: str, student_identifier: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS hit FROM roster_entries WHERE session_id=%s AND student_identifier=%s",
                (session_id, student_identifier),
            )
            return fetchone(cur) is not None

    def add(self, session_id: str, student_identifier: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO roster_entries(session_id, student_identifier)
                VALUES(%s,%s)
                """,
                (session_id, student_identifier),
            )
            return cur.rowcount == 1

    def remove(self, session_id: str, student_identifier: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM roster_entries WHERE session_id=%s AND student_identifier=%s",
                (session_id, student_identifier),
            )
            return cur.rowcount > 0

    def list_for_session(self, session_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_identifier
                FROM roster_entries
                WHERE session_id=%s
                ORDER BY student_identifier ASC
                """,
                (session_id,),
            )
            return [r["student_identifier"] for r in fetchall(cur)]
