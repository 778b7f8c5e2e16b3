from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceAction


@dataclass(frozen=True)
class ClassSession:
    """Domain entity: a scheduled class meeting.

    Codes and windows are fixed at creation; the entity is never mutated.
    """

    session_id: str
    title: str
    starts_at: datetime
    ends_at: datetime
    checkin_code: str
    checkout_code: str
    checkin_expires_at: Optional[datetime] = None
    checkout_expires_at: Optional[datetime] = None

    def code_for(self, action: AttendanceAction) -> str:
        if action == AttendanceAction.CHECKIN:
            return self.checkin_code
        return self.checkout_code


@dataclass(frozen=True)
class Window:
    """Closed interval [opens_at, closes_at]; opens_at None means no lower bound."""

    opens_at: Optional[datetime]
    closes_at: datetime

    def is_before(self, now: datetime) -> bool:
        return self.opens_at is not None and now < self.opens_at

    def is_after(self, now: datetime) -> bool:
        return now > self.closes_at


@dataclass(frozen=True)
class SessionWindows:
    checkin: Window
    checkout: Window

    @property
    def checkin_opens_at(self) -> Optional[datetime]:
        return self.checkin.opens_at

    @property
    def checkin_closes_at(self) -> datetime:
        return self.checkin.closes_at

    @property
    def checkout_opens_at(self) -> Optional[datetime]:
        return self.checkout.opens_at

    @property
    def checkout_closes_at(self) -> datetime:
        return self.checkout.closes_at

    def for_action(self, action: AttendanceAction) -> Window:
        if action == AttendanceAction.CHECKIN:
            return self.checkin
        return self.checkout
