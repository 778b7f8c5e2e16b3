from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Protocol, Sequence, Union

from ..common.validators import normalize_student_identifier
from ..core.enums import AttendanceAction, AttendanceState, CheckMethod
from ..core.exceptions import (
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
from ..sessions.model import ClassSession, SessionWindows
from ..sessions.policies.base import WindowPolicy
from ..sessions.policies.offset_policy import OffsetWindowPolicy
from .model import AttendanceRecord, ManualAction, ValidatedAction, state_of
from .payload import ScanPayload, parse_scan_payload

_NOT_OPEN = {
    AttendanceAction.CHECKIN: "Check-in is not open yet.",
    AttendanceAction.CHECKOUT: "Check-out is not open yet.",
}
_CLOSED = {
    AttendanceAction.CHECKIN: "Check-in has closed for today.",
    AttendanceAction.CHECKOUT: "Check-out has closed for today.",
}


class RosterLookup(Protocol):
    def is_on_roster(self, session_id: str, student_identifier: str) -> bool:
        raise NotImplementedError


class AttendanceWindowEngine:
    """Pure attendance rules: windows, action validation and state transitions.

    Stateless apart from the window policy. Every failure is raised as an
    AttendanceError subclass; nothing here logs, retries or touches storage.
    """

    def __init__(self, window_policy: Optional[WindowPolicy] = None):
        self._policy = window_policy or OffsetWindowPolicy()

    @property
    def window_policy(self) -> WindowPolicy:
        return self._policy

    def compute_windows(self, starts_at: datetime, ends_at: datetime) -> SessionWindows:
        return self._policy.compute(starts_at, ends_at)

    def validate_action(
        self,
        *,
        now: datetime,
        session: ClassSession,
        payload: Union[str, bytes, ScanPayload, ManualAction, None],
        method: CheckMethod,
        student_identifier: Optional[str] = None,
        roster: Optional[RosterLookup] = None,
        also_known_as: Sequence[str] = (),
    ) -> ValidatedAction:
        if CheckMethod(method) == CheckMethod.MANUAL:
            if not isinstance(payload, ManualAction):
                raise MalformedPayload("Manual actions need a target student and action.")
            return self.validate_manual(session=session, target=payload)

        if roster is None:
            raise ValueError("Scan validation needs a roster lookup")
        return self.validate_scan(
            now=now,
            session=session,
            payload=payload,
            student_identifier=student_identifier,
            roster=roster,
            also_known_as=also_known_as,
        )

    def validate_scan(
        self,
        *,
        now: datetime,
        session: ClassSession,
        payload: Union[str, bytes, ScanPayload, None],
        student_identifier: Optional[str],
        roster: RosterLookup,
        also_known_as: Sequence[str] = (),
    ) -> ValidatedAction:
        """Validate a student scan.

        The roster may list a student by license or by email; `also_known_as`
        carries the other identifiers, and the first one on the roster keys
        the record.
        """
        scan = payload if isinstance(payload, ScanPayload) else parse_scan_payload(payload)

        if scan.session_id != session.session_id:
            raise WrongSession()

        action = _parse_action(scan.action)

        if scan.code != session.code_for(action):
            raise InvalidCode()

        window = self._policy.windows_for(session).for_action(action)
        if window.is_before(now):
            raise TooEarly(_NOT_OPEN[action])
        if window.is_after(now):
            raise TooLate(_CLOSED[action])
        if now > scan.expires_at:
            raise CodeExpired()

        student = _roster_match(session.session_id, student_identifier, also_known_as, roster)

        return ValidatedAction(
            action=action,
            session_id=session.session_id,
            student_identifier=student,
            method=CheckMethod.SCAN,
        )

    def validate_manual(self, *, session: ClassSession, target: ManualAction) -> ValidatedAction:
        """Admin override ("phone trouble"): skips code, window and roster checks.

        The caller must have verified the admin capability already.
        """
        if target.session_id != session.session_id:
            raise WrongSession()

        action = _parse_action(target.action)
        return ValidatedAction(
            action=action,
            session_id=session.session_id,
            student_identifier=normalize_student_identifier(target.student_identifier),
            method=CheckMethod.MANUAL,
        )

    def apply_action(
        self,
        current: Optional[AttendanceRecord],
        validated: ValidatedAction,
        now: datetime,
    ) -> AttendanceRecord:
        state = state_of(current)
        base = current or AttendanceRecord(
            session_id=validated.session_id,
            student_identifier=validated.student_identifier,
        )

        if validated.action == AttendanceAction.CHECKIN:
            if state != AttendanceState.NOT_CHECKED_IN:
                raise AlreadyCheckedIn()
            return replace(
                base,
                checkin_at=now,
                method_checkin=validated.method,
                checkout_at=None,
                method_checkout=None,
            )

        if state == AttendanceState.NOT_CHECKED_IN:
            raise CheckinRequired()
        if state == AttendanceState.CHECKED_OUT:
            raise AlreadyCheckedOut()
        return replace(base, checkout_at=now, method_checkout=validated.method)

    def undo_checkin(self, current: Optional[AttendanceRecord]) -> AttendanceRecord:
        """Clear check-in; check-out is cleared with it since it presupposes a check-in."""
        if current is None:
            raise RecordNotFound()
        return replace(current, checkin_at=None, method_checkin=None, checkout_at=None, method_checkout=None)

    def undo_checkout(self, current: Optional[AttendanceRecord]) -> AttendanceRecord:
        if current is None:
            raise RecordNotFound()
        return replace(current, checkout_at=None, method_checkout=None)


def _parse_action(value: str) -> AttendanceAction:
    try:
        return AttendanceAction(value)
    except ValueError:
        raise UnknownAction() from None


def _roster_match(
    session_id: str,
    student_identifier: Optional[str],
    also_known_as: Sequence[str],
    roster: RosterLookup,
) -> str:
    candidates = [normalize_student_identifier(student_identifier)]
    candidates += [normalize_student_identifier(alias) for alias in also_known_as if alias and alias.strip()]
    for candidate in dict.fromkeys(candidates):
        if roster.is_on_roster(session_id, candidate):
            return candidate
    raise NotOnRoster()
