from __future__ import annotations

from typing import Protocol, Sequence


class RosterRepository(Protocol):
    def is_on_roster(self, session_id: str, student_identifier: str) -> bool:
        raise NotImplementedError

    def add(self, session_id: str, student_identifier: str) -> bool:
        """Returns False when the student was already on the roster."""

        raise NotImplementedError

    def remove(self, session_id: str, student_identifier: str) -> bool:
        raise NotImplementedError

    def list_for_session(self, session_id: str) -> Sequence[str]:
        raise NotImplementedError
