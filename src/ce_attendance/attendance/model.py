from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceAction, AttendanceState, CheckMethod


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one session.

    Keyed by (session_id, student_identifier). Check-out is only ever set on
    top of a check-in.
    """

    session_id: str
    student_identifier: str
    checkin_at: Optional[datetime] = None
    checkout_at: Optional[datetime] = None
    method_checkin: Optional[CheckMethod] = None
    method_checkout: Optional[CheckMethod] = None

    @property
    def state(self) -> AttendanceState:
        return state_of(self)


def state_of(record: Optional[AttendanceRecord]) -> AttendanceState:
    if record is None or record.checkin_at is None:
        return AttendanceState.NOT_CHECKED_IN
    if record.checkout_at is None:
        return AttendanceState.CHECKED_IN
    return AttendanceState.CHECKED_OUT


@dataclass(frozen=True)
class ValidatedAction:
    """An action that passed validation and is ready for a state transition."""

    action: AttendanceAction
    session_id: str
    student_identifier: str
    method: CheckMethod


@dataclass(frozen=True)
class ManualAction:
    """Admin override target: no code, no window, no roster check."""

    action: str
    session_id: str
    student_identifier: str


@dataclass(frozen=True)
class AttendanceRowUI:
    student_identifier: str
    display_name: str
    state: str
    checkin_at: str
    checkout_at: str
    method_checkin: str
    method_checkout: str
    headshot_url: Optional[str] = None
