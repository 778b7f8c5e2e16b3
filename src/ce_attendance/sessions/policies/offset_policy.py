from __future__ import annotations

from datetime import datetime, timedelta

from ...core import constants
from ..model import SessionWindows, Window
from .base import WindowPolicy


class OffsetWindowPolicy(WindowPolicy):
    """Windows recomputed as offsets around the session's start and end."""

    def __init__(
        self,
        *,
        checkin_open_before: int = constants.CHECKIN_OPEN_BEFORE_MINUTES,
        checkin_close_after: int = constants.CHECKIN_CLOSE_AFTER_MINUTES,
        checkout_open_before: int = constants.CHECKOUT_OPEN_BEFORE_MINUTES,
        checkout_close_after: int = constants.CHECKOUT_CLOSE_AFTER_MINUTES,
    ):
        self._checkin_open_before = timedelta(minutes=int(checkin_open_before))
        self._checkin_close_after = timedelta(minutes=int(checkin_close_after))
        self._checkout_open_before = timedelta(minutes=int(checkout_open_before))
        self._checkout_close_after = timedelta(minutes=int(checkout_close_after))

    def _derive(self, starts_at: datetime, ends_at: datetime) -> SessionWindows:
        return SessionWindows(
            checkin=Window(
                opens_at=starts_at - self._checkin_open_before,
                closes_at=starts_at + self._checkin_close_after,
            ),
            checkout=Window(
                opens_at=ends_at - self._checkout_open_before,
                closes_at=ends_at + self._checkout_close_after,
            ),
        )
