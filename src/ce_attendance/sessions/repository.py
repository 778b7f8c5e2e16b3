from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ClassSession


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[ClassSession]:
        raise NotImplementedError

    def list_active(self, *, now: datetime) -> Sequence[ClassSession]:
        """Sessions that have not ended yet (ends_at >= now), earliest start first."""

        raise NotImplementedError

    def create(self, session: ClassSession) -> str:
        raise NotImplementedError
