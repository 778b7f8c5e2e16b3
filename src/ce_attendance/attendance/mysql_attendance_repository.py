from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import CheckMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _method(value: Any) -> Optional[CheckMethod]:
    return CheckMethod(value) if value else None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        session_id=str(r["session_id"]),
        student_identifier=r["student_identifier"],
        checkin_at=from_db_datetime(r.get("checkin_at")),
        checkout_at=from_db_datetime(r.get("checkout_at")),
        method_checkin=_method(r.get("method_checkin")),
        method_checkout=_method(r.get("method_checkout")),
    )


def _method_value(value: Optional[CheckMethod]) -> Optional[str]:
    return value.value if value else None


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, session_id: str, student_identifier: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, student_identifier, checkin_at, checkout_at, method_checkin, method_checkout
                FROM attendance_records
                WHERE session_id=%s AND student_identifier=%s
                """,
                (session_id, student_identifier),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def save(self, record: AttendanceRecord, *, expected: Optional[AttendanceRecord]) -> bool:
        if expected is None:
            return self._insert(record)

        with db_cursor(self._conn_factory) as (_, cur):
            # `<=>` is MySQL's NULL-safe equality, so an absent timestamp matches NULL.
            cur.execute(
                """
                UPDATE attendance_records
                SET checkin_at=%s, checkout_at=%s, method_checkin=%s, method_checkout=%s
                WHERE session_id=%s AND student_identifier=%s
                  AND checkin_at <=> %s AND checkout_at <=> %s
                """,
                (
                    to_db_datetime(record.checkin_at),
                    to_db_datetime(record.checkout_at),
                    _method_value(record.method_checkin),
                    _method_value(record.method_checkout),
                    record.session_id,
                    record.student_identifier,
                    to_db_datetime(expected.checkin_at),
                    to_db_datetime(expected.checkout_at),
                ),
            )
            return cur.rowcount == 1

    def _insert(self, record: AttendanceRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        session_id, student_identifier, checkin_at, checkout_at, method_checkin, method_checkout
                    )
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.session_id,
                        record.student_identifier,
                        to_db_datetime(record.checkin_at),
                        to_db_datetime(record.checkout_at),
                        _method_value(record.method_checkin),
                        _method_value(record.method_checkout),
                    ),
                )
                return True
        except mysql.connector.IntegrityError:
            # Primary key (session_id, student_identifier) already taken.
            return False

    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, student_identifier, checkin_at, checkout_at, method_checkin, method_checkout
                FROM attendance_records
                WHERE session_id=%s
                ORDER BY checkin_at IS NULL, checkin_at ASC, student_identifier ASC
                """,
                (session_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]
