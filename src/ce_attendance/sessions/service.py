from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.payload import ScanPayload
from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.enums import AttendanceAction
from ..core.exceptions import SessionNotFound, UnknownAction
from ..users.model import Principal
from ..users.service import require_admin
from .codes import CodeGenerator, QrRenderer
from .model import ClassSession, SessionWindows
from .policies.base import WindowPolicy
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionService:
    def __init__(
        self,
        sessions: SessionRepository,
        window_policy: WindowPolicy,
        *,
        codes: Optional[CodeGenerator] = None,
        qr: Optional[QrRenderer] = None,
    ):
        self._sessions = sessions
        self._policy = window_policy
        self._codes = codes or CodeGenerator()
        self._qr = qr or QrRenderer()

    def create_session(
        self,
        *,
        principal: Optional[Principal],
        title: str,
        starts_at: datetime,
        ends_at: datetime,
    ) -> ClassSession:
        require_admin(principal)
        title = require_non_empty(title, "Title")
        windows = self._policy.compute(starts_at, ends_at)

        checkin_code = self._codes.new_code()
        checkout_code = self._codes.new_code()
        while checkout_code == checkin_code:
            checkout_code = self._codes.new_code()

        session = ClassSession(
            session_id=str(uuid.uuid4()),
            title=title,
            starts_at=starts_at,
            ends_at=ends_at,
            checkin_code=checkin_code,
            checkout_code=checkout_code,
            checkin_expires_at=windows.checkin_closes_at,
            checkout_expires_at=windows.checkout_closes_at,
        )
        self._sessions.create(session)
        logger.info("Created session %s (%s) by %s", session.session_id, title, principal.user_id)
        return session

    def get(self, session_id: str) -> ClassSession:
        session = self._sessions.get_by_id(session_id) if session_id else None
        if not session:
            raise SessionNotFound()
        return session

    def list_active(self, *, now: Optional[datetime] = None) -> Sequence[ClassSession]:
        return self._sessions.list_active(now=now or now_utc())

    def windows_for(self, session: ClassSession) -> SessionWindows:
        return self._policy.windows_for(session)

    def build_payload(self, session: ClassSession, action: str) -> ScanPayload:
        try:
            action = AttendanceAction(action)
        except ValueError:
            raise UnknownAction() from None

        return ScanPayload(
            action=action.value,
            session_id=session.session_id,
            code=session.code_for(action),
            expires_at=self._policy.windows_for(session).for_action(action).closes_at,
        )

    def render_qr_png(self, *, principal: Optional[Principal], session_id: str, action: str) -> bytes:
        require_admin(principal)
        payload = self.build_payload(self.get(session_id), action)
        return self._qr.render_png(payload.to_json())
