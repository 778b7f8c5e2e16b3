from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ...core.exceptions import InvalidSessionWindow
from ..model import ClassSession, SessionWindows


class WindowPolicy(ABC):
    """Strategy Pattern: encapsulate how check-in/check-out windows are derived."""

    def compute(self, starts_at: datetime, ends_at: datetime) -> SessionWindows:
        if not ends_at > starts_at:
            raise InvalidSessionWindow()
        return self._derive(starts_at, ends_at)

    def windows_for(self, session: ClassSession) -> SessionWindows:
        return self.compute(session.starts_at, session.ends_at)

    @abstractmethod
    def _derive(self, starts_at: datetime, ends_at: datetime) -> SessionWindows:
        raise NotImplementedError
