from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from ..common.datetime_utils import now_utc
from ..common.validators import normalize_student_identifier
from ..core.enums import AttendanceAction, AttendanceState, CheckMethod
from ..core.exceptions import ConcurrentUpdate, SessionNotFound, UnknownAction
from ..roster.repository import RosterRepository
from ..sessions.repository import SessionRepository
from ..users.model import Principal
from ..users.repository import UserRepository
from ..users.service import HeadshotService, require_admin
from .engine import AttendanceWindowEngine
from .model import AttendanceRecord, AttendanceRowUI, ManualAction, ValidatedAction
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

Transition = Callable[[Optional[AttendanceRecord]], AttendanceRecord]

_STATE_LABELS = {
    AttendanceState.NOT_CHECKED_IN: "Not checked in",
    AttendanceState.CHECKED_IN: "Checked in",
    AttendanceState.CHECKED_OUT: "Checked out",
}


class AttendanceService:
    """Use cases: scan check-in/out, admin overrides, session attendance views.

    Reads the current record, lets the engine decide, then writes conditionally.
    A lost write race is retried once against the fresh record, which turns a
    double scan into the engine's normal "already checked in" rejection.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        roster: RosterRepository,
        *,
        engine: Optional[AttendanceWindowEngine] = None,
        users: Optional[UserRepository] = None,
        headshots: Optional[HeadshotService] = None,
        max_attempts: int = 2,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._roster = roster
        self._engine = engine or AttendanceWindowEngine()
        self._users = users
        self._headshots = headshots
        self._max_attempts = max(1, int(max_attempts))

    def _get_session(self, session_id: Optional[str]):
        session = self._sessions.get_by_id(session_id) if session_id else None
        if not session:
            raise SessionNotFound()
        return session

    def _commit(self, session_id: str, student_identifier: str, transition: Transition) -> AttendanceRecord:
        for _ in range(self._max_attempts):
            current = self._attendance.get(session_id, student_identifier)
            nxt = transition(current)
            if nxt == current:
                return nxt
            if self._attendance.save(nxt, expected=current):
                return nxt
            logger.info("Attendance write race for %s/%s, re-reading", session_id, student_identifier)
        raise ConcurrentUpdate()

    def _apply(self, validated: ValidatedAction, now: datetime) -> AttendanceRecord:
        record = self._commit(
            validated.session_id,
            validated.student_identifier,
            lambda current: self._engine.apply_action(current, validated, now),
        )
        logger.info(
            "%s %s for %s in session %s",
            validated.method.value,
            validated.action.value,
            validated.student_identifier,
            validated.session_id,
        )
        return record

    def scan(
        self,
        *,
        principal: Principal,
        session_id: Optional[str],
        payload: Union[str, bytes],
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Student scans a displayed QR code while `session_id` is selected."""

        now = now or now_utc()
        session = self._get_session(session_id)
        validated = self._engine.validate_action(
            now=now,
            session=session,
            payload=payload,
            method=CheckMethod.SCAN,
            student_identifier=principal.student_identifier,
            roster=self._roster,
            also_known_as=(principal.email,),
        )
        return self._apply(validated, now)

    def manual(
        self,
        *,
        principal: Optional[Principal],
        session_id: str,
        student_identifier: str,
        action: str,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Admin override for phone trouble, walk-ins and roster gaps."""

        require_admin(principal)
        now = now or now_utc()
        session = self._get_session(session_id)
        validated = self._engine.validate_action(
            now=now,
            session=session,
            payload=ManualAction(action=action, session_id=session_id, student_identifier=student_identifier),
            method=CheckMethod.MANUAL,
        )
        return self._apply(validated, now)

    def undo(
        self,
        *,
        principal: Optional[Principal],
        session_id: str,
        student_identifier: str,
        action: str,
    ) -> AttendanceRecord:
        """Clear a check-in (with any check-out) or just a check-out."""

        require_admin(principal)
        self._get_session(session_id)
        try:
            action = AttendanceAction(action)
        except ValueError:
            raise UnknownAction() from None

        student = normalize_student_identifier(student_identifier)
        if action == AttendanceAction.CHECKIN:
            transition = self._engine.undo_checkin
        else:
            transition = self._engine.undo_checkout

        record = self._commit(session_id, student, transition)
        logger.info("Admin %s undid %s for %s in session %s", principal.user_id, action.value, student, session_id)
        return record

    def get_record(self, *, session_id: str, student_identifier: str) -> Optional[AttendanceRecord]:
        return self._attendance.get(session_id, normalize_student_identifier(student_identifier))

    def my_record(self, *, principal: Principal, session_id: str) -> Optional[AttendanceRecord]:
        """The caller's record, under whichever identifier their scan was keyed by."""
        for identifier in principal.identifiers:
            record = self.get_record(session_id=session_id, student_identifier=identifier)
            if record:
                return record
        return None

    def list_session_ui(self, *, principal: Optional[Principal], session_id: str) -> list[AttendanceRowUI]:
        """Roster members and anyone with a record, in one list for the instructor."""

        require_admin(principal)
        self._get_session(session_id)

        records = {r.student_identifier: r for r in self._attendance.list_for_session(session_id)}
        students = list(records)
        for student in self._roster.list_for_session(session_id):
            if student not in records:
                students.append(student)

        return [self._to_ui(student, records.get(student)) for student in students]

    def _display_name(self, student_identifier: str) -> str:
        if not self._users:
            return student_identifier
        profile = self._users.get_by_trec_license(student_identifier) or self._users.get_by_email(student_identifier)
        return profile.display_name if profile else student_identifier

    def _to_ui(self, student_identifier: str, record: Optional[AttendanceRecord]) -> AttendanceRowUI:
        record = record or AttendanceRecord(session_id="", student_identifier=student_identifier)

        def _fmt(value: Optional[datetime]) -> str:
            return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"

        return AttendanceRowUI(
            student_identifier=student_identifier,
            display_name=self._display_name(student_identifier),
            state=_STATE_LABELS[record.state],
            checkin_at=_fmt(record.checkin_at),
            checkout_at=_fmt(record.checkout_at),
            method_checkin=record.method_checkin.value if record.method_checkin else "-",
            method_checkout=record.method_checkout.value if record.method_checkout else "-",
            headshot_url=self._headshots.headshot_url(student_identifier) if self._headshots else None,
        )
