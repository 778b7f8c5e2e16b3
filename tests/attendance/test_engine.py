from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from ce_attendance.attendance.engine import AttendanceWindowEngine
from ce_attendance.attendance.model import AttendanceRecord, ManualAction
from ce_attendance.attendance.payload import ScanPayload
from ce_attendance.core.enums import AttendanceAction, AttendanceState, CheckMethod
from ce_attendance.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    CheckinRequired,
    CodeExpired,
    InvalidCode,
    MalformedPayload,
    NotOnRoster,
    RecordNotFound,
    TooEarly,
    TooLate,
    UnknownAction,
    WrongSession,
)
from ce_attendance.sessions.policies.fixed_expiry_policy import FixedExpiryWindowPolicy

from conftest import InMemoryRoster


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 2, 1, hour, minute, tzinfo=timezone.utc)


STUDENT = "0654321"


@pytest.fixture
def engine(policy):
    return AttendanceWindowEngine(policy)


@pytest.fixture
def roster(class_session):
    return InMemoryRoster({class_session.session_id: {STUDENT}})


def scan_json(session, action="checkin", *, code=None, session_id=None, expires_at=None) -> str:
    action_enum = AttendanceAction(action) if action in ("checkin", "checkout") else AttendanceAction.CHECKIN
    return ScanPayload(
        action=action,
        session_id=session_id or session.session_id,
        code=code or session.code_for(action_enum),
        expires_at=expires_at or at(23, 59),
    ).to_json()


def scan(engine, session, roster, now, action="checkin", student=STUDENT, **payload_kw):
    return engine.validate_action(
        now=now,
        session=session,
        payload=scan_json(session, action, **payload_kw),
        method=CheckMethod.SCAN,
        student_identifier=student,
        roster=roster,
    )


def manual(engine, session, action="checkin", student=STUDENT, session_id=None):
    return engine.validate_action(
        now=at(12),
        session=session,
        payload=ManualAction(action=action, session_id=session_id or session.session_id, student_identifier=student),
        method=CheckMethod.MANUAL,
    )


def test_compute_windows_delegates_to_policy(engine, class_session):
    w = engine.compute_windows(class_session.starts_at, class_session.ends_at)

    assert (w.checkin_opens_at, w.checkin_closes_at) == (at(8, 30), at(9, 30))
    assert (w.checkout_opens_at, w.checkout_closes_at) == (at(16), at(18))


# Scenario A
def test_checkin_scan_too_early_then_succeeds(engine, class_session, roster):
    with pytest.raises(TooEarly) as exc:
        scan(engine, class_session, roster, at(8, 30) - timedelta(minutes=5))
    assert str(exc.value) == "Check-in is not open yet."

    validated = scan(engine, class_session, roster, at(8, 45))
    record = engine.apply_action(None, validated, at(8, 45))

    assert record.state == AttendanceState.CHECKED_IN
    assert record.checkin_at == at(8, 45)
    assert record.method_checkin == CheckMethod.SCAN


def test_scan_at_0835_is_inside_the_offset_window(engine, class_session, roster):
    # Check-in opens 30 minutes before a 09:00 start, so 08:35 is already open.
    validated = scan(engine, class_session, roster, at(8, 35))

    assert validated.action == AttendanceAction.CHECKIN
    assert validated.method == CheckMethod.SCAN


def test_window_bounds_are_inclusive(engine, class_session, roster):
    assert scan(engine, class_session, roster, at(8, 30)).action == AttendanceAction.CHECKIN
    assert scan(engine, class_session, roster, at(9, 30)).action == AttendanceAction.CHECKIN


# Scenario B
def test_checkin_scan_too_late_but_manual_still_works(engine, class_session, roster):
    with pytest.raises(TooLate) as exc:
        scan(engine, class_session, roster, at(9, 45))
    assert str(exc.value) == "Check-in has closed for today."

    validated = manual(engine, class_session)
    record = engine.apply_action(None, validated, at(9, 45))

    assert record.state == AttendanceState.CHECKED_IN
    assert record.method_checkin == CheckMethod.MANUAL


def test_expired_payload_is_a_distinct_too_late(engine, class_session, roster):
    with pytest.raises(CodeExpired) as exc:
        scan(engine, class_session, roster, at(9, 10), expires_at=at(9, 5))

    assert isinstance(exc.value, TooLate)
    assert str(exc.value) == "That code has expired for today."


def test_checkout_window_messages(engine, class_session, roster):
    with pytest.raises(TooEarly) as early:
        scan(engine, class_session, roster, at(15, 59), action="checkout")
    with pytest.raises(TooLate) as late:
        scan(engine, class_session, roster, at(18, 1), action="checkout")

    assert str(early.value) == "Check-out is not open yet."
    assert str(late.value) == "Check-out has closed for today."


# Scenario C
def test_not_on_roster_scan_rejected_manual_allowed(engine, class_session, roster):
    with pytest.raises(NotOnRoster):
        scan(engine, class_session, roster, at(9), student="9999999")

    validated = manual(engine, class_session, student="9999999")

    assert validated.student_identifier == "9999999"
    assert validated.method == CheckMethod.MANUAL


def test_student_identifier_is_normalized(engine, class_session):
    roster = InMemoryRoster({class_session.session_id: {"pat@example.com"}})

    validated = scan(engine, class_session, roster, at(9), student="  Pat@Example.COM ")

    assert validated.student_identifier == "pat@example.com"


def test_roster_may_list_the_student_by_email(engine, class_session):
    roster = InMemoryRoster({class_session.session_id: {"pat@example.com"}})

    validated = engine.validate_action(
        now=at(9),
        session=class_session,
        payload=scan_json(class_session),
        method=CheckMethod.SCAN,
        student_identifier=STUDENT,
        roster=roster,
        also_known_as=["Pat@Example.com", ""],
    )

    assert validated.student_identifier == "pat@example.com"
    with pytest.raises(NotOnRoster):
        scan(engine, class_session, roster, at(9))


# Scenario D
def test_full_scan_cycle_then_further_submissions_rejected(engine, class_session, roster):
    t0, t1 = at(8, 50), at(16, 30)
    record = engine.apply_action(None, scan(engine, class_session, roster, t0), t0)
    record = engine.apply_action(record, scan(engine, class_session, roster, t1, action="checkout"), t1)

    assert (record.checkin_at, record.checkout_at) == (t0, t1)
    assert (record.method_checkin, record.method_checkout) == (CheckMethod.SCAN, CheckMethod.SCAN)
    assert record.state == AttendanceState.CHECKED_OUT

    snapshot = record
    with pytest.raises(AlreadyCheckedIn):
        engine.apply_action(record, manual(engine, class_session, "checkin"), at(16, 40))
    with pytest.raises(AlreadyCheckedOut):
        engine.apply_action(record, scan(engine, class_session, roster, at(16, 40), action="checkout"), at(16, 40))
    assert record == snapshot


# Scenario E
def test_wrong_session_wins_over_everything_else(engine, class_session, roster):
    with pytest.raises(WrongSession):
        scan(engine, class_session, roster, at(3), session_id="other", code="BADBADBAD2", student="nobody")
    with pytest.raises(WrongSession):
        manual(engine, class_session, session_id="other")


def test_idempotent_checkin(engine, class_session, roster):
    validated = scan(engine, class_session, roster, at(9))
    first = engine.apply_action(None, validated, at(9))

    with pytest.raises(AlreadyCheckedIn):
        engine.apply_action(first, validated, at(9, 1))
    assert first.checkin_at == at(9)


def test_checkout_before_checkin_requires_checkin(engine, class_session):
    validated = manual(engine, class_session, "checkout")

    with pytest.raises(CheckinRequired):
        engine.apply_action(None, validated, at(16))

    empty = AttendanceRecord(session_id=class_session.session_id, student_identifier=STUDENT)
    with pytest.raises(CheckinRequired):
        engine.apply_action(empty, validated, at(16))
    assert empty.checkout_at is None


def test_rule_order_action_before_code(engine, class_session, roster):
    with pytest.raises(UnknownAction):
        scan(engine, class_session, roster, at(9), action="lunch", code="WRONGWRONG")


def test_rule_order_code_before_window(engine, class_session, roster):
    with pytest.raises(InvalidCode):
        scan(engine, class_session, roster, at(3), code="WRONGWRONG")


def test_checkin_code_does_not_check_out(engine, class_session, roster):
    with pytest.raises(InvalidCode):
        scan(engine, class_session, roster, at(16, 30), action="checkout", code=class_session.checkin_code)


def test_window_checked_before_roster(engine, class_session, roster):
    with pytest.raises(TooEarly):
        scan(engine, class_session, roster, at(7), student="9999999")


def test_malformed_scan_payload(engine, class_session, roster):
    with pytest.raises(MalformedPayload):
        engine.validate_action(
            now=at(9),
            session=class_session,
            payload='{"action": "checkin"}',
            method=CheckMethod.SCAN,
            student_identifier=STUDENT,
            roster=roster,
        )


def test_manual_unknown_action(engine, class_session):
    with pytest.raises(UnknownAction):
        manual(engine, class_session, "pause")


def test_manual_method_requires_manual_target(engine, class_session):
    with pytest.raises(MalformedPayload):
        engine.validate_action(now=at(9), session=class_session, payload="{}", method=CheckMethod.MANUAL)


def test_fixed_expiry_policy_never_too_early(class_session, roster):
    engine = AttendanceWindowEngine(FixedExpiryWindowPolicy())

    assert scan(engine, class_session, roster, at(6)).action == AttendanceAction.CHECKIN
    with pytest.raises(TooLate):
        scan(engine, class_session, roster, at(10, 31))


def test_undo_checkin_cascades_to_checkout(engine):
    record = AttendanceRecord(
        session_id="sess-1",
        student_identifier=STUDENT,
        checkin_at=at(9),
        checkout_at=at(17),
        method_checkin=CheckMethod.SCAN,
        method_checkout=CheckMethod.MANUAL,
    )

    cleared = engine.undo_checkin(record)

    assert cleared.state == AttendanceState.NOT_CHECKED_IN
    assert cleared.checkout_at is None and cleared.method_checkout is None
    assert record.checkout_at == at(17)


def test_undo_checkout_keeps_checkin(engine):
    record = AttendanceRecord("sess-1", STUDENT, at(9), at(17), CheckMethod.SCAN, CheckMethod.SCAN)

    reopened = engine.undo_checkout(record)

    assert reopened.state == AttendanceState.CHECKED_IN
    assert reopened.checkin_at == at(9)


def test_undo_on_absent_record(engine):
    with pytest.raises(RecordNotFound):
        engine.undo_checkin(None)
    with pytest.raises(RecordNotFound):
        engine.undo_checkout(None)


def test_checkin_after_undo_is_allowed_again(engine, class_session):
    record = AttendanceRecord("sess-1", STUDENT, at(9), None, CheckMethod.SCAN, None)
    validated = manual(engine, class_session, "checkin")

    again = engine.apply_action(engine.undo_checkin(record), validated, at(9, 20))

    assert again.checkin_at == at(9, 20)
    assert again.method_checkin == CheckMethod.MANUAL
