from __future__ import annotations

from datetime import datetime, timedelta

from ...core import constants
from ..model import ClassSession, SessionWindows, Window
from .base import WindowPolicy


class FixedExpiryWindowPolicy(WindowPolicy):
    """Codes valid until a fixed expiry stamped at creation; no opening bound."""

    def __init__(
        self,
        *,
        checkin_expiry_after_start: int = constants.FIXED_CHECKIN_EXPIRY_MINUTES,
        checkout_expiry_after_end: int = constants.FIXED_CHECKOUT_EXPIRY_MINUTES,
    ):
        self._checkin_expiry = timedelta(minutes=int(checkin_expiry_after_start))
        self._checkout_expiry = timedelta(minutes=int(checkout_expiry_after_end))

    def _derive(self, starts_at: datetime, ends_at: datetime) -> SessionWindows:
        return SessionWindows(
            checkin=Window(opens_at=None, closes_at=starts_at + self._checkin_expiry),
            checkout=Window(opens_at=None, closes_at=ends_at + self._checkout_expiry),
        )

    def windows_for(self, session: ClassSession) -> SessionWindows:
        computed = super().windows_for(session)
        # Stored expiries win over recomputed ones.
        return SessionWindows(
            checkin=Window(opens_at=None, closes_at=session.checkin_expires_at or computed.checkin_closes_at),
            checkout=Window(opens_at=None, closes_at=session.checkout_expires_at or computed.checkout_closes_at),
        )
