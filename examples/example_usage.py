"""Example: drive the attendance engine directly (no Flask, no database).

Goal: show that the window/validation/transition rules are plain Python and
that controllers are only a thin layer on top.
"""

from datetime import datetime, timedelta, timezone

from ce_attendance.attendance.engine import AttendanceWindowEngine
from ce_attendance.attendance.payload import ScanPayload
from ce_attendance.core.exceptions import AttendanceError
from ce_attendance.sessions.codes import CodeGenerator
from ce_attendance.sessions.model import ClassSession


class OneStudentRoster:
    def __init__(self, student: str):
        self._student = student

    def is_on_roster(self, session_id: str, student_identifier: str) -> bool:
        return student_identifier == self._student


def main():
    engine = AttendanceWindowEngine()
    codes = CodeGenerator()
    start = datetime(2026, 2, 1, 9, 0, tzinfo=timezone.utc)
    session = ClassSession(
        session_id="demo",
        title="Law of Agency",
        starts_at=start,
        ends_at=start + timedelta(hours=8),
        checkin_code=codes.new_code(),
        checkout_code=codes.new_code(),
    )
    windows = engine.compute_windows(session.starts_at, session.ends_at)
    payload = ScanPayload("checkin", session.session_id, session.checkin_code, windows.checkin_closes_at).to_json()
    print("QR payload:", payload)

    roster = OneStudentRoster("0654321")
    for minutes in (-35, -15):
        now = start + timedelta(minutes=minutes)
        try:
            validated = engine.validate_action(
                now=now, session=session, payload=payload, method="scan", student_identifier="0654321", roster=roster
            )
            print(now.isoformat(), "->", engine.apply_action(None, validated, now).state.value)
        except AttendanceError as e:
            print(now.isoformat(), "->", e.code, e.message)


if __name__ == "__main__":
    main()
