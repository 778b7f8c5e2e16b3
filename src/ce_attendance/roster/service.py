from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.validators import normalize_student_identifier
from ..core.exceptions import SessionNotFound, ValidationError
from ..sessions.repository import SessionRepository
from ..users.model import Principal
from ..users.service import require_admin
from .repository import RosterRepository

logger = logging.getLogger(__name__)


class RosterService:
    """Use case: instructors maintain who is expected in each session."""

    def __init__(self, roster: RosterRepository, sessions: SessionRepository):
        self._roster = roster
        self._sessions = sessions

    def _require_session(self, session_id: str) -> None:
        if not self._sessions.get_by_id(session_id):
            raise SessionNotFound()

    def add_students(
        self,
        *,
        principal: Optional[Principal],
        session_id: str,
        student_identifiers: Iterable[str],
    ) -> int:
        require_admin(principal)
        self._require_session(session_id)

        identifiers = [s for s in (v.strip() for v in student_identifiers if v) if s]
        if not identifiers:
            raise ValidationError("Provide at least one license number or email.")

        added = 0
        for raw in identifiers:
            if self._roster.add(session_id, normalize_student_identifier(raw)):
                added += 1
        logger.info("Roster %s: added %d of %d students", session_id, added, len(identifiers))
        return added

    def remove_student(self, *, principal: Optional[Principal], session_id: str, student_identifier: str) -> None:
        require_admin(principal)
        if not self._roster.remove(session_id, normalize_student_identifier(student_identifier)):
            raise ValidationError("That student is not on the roster.")

    def list_roster(self, *, principal: Optional[Principal], session_id: str) -> Sequence[str]:
        require_admin(principal)
        self._require_session(session_id)
        return self._roster.list_for_session(session_id)
