from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, session_id: str, student_identifier: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def save(self, record: AttendanceRecord, *, expected: Optional[AttendanceRecord]) -> bool:
        """Conditional write (compare-and-swap).

        Stores `record` only if the stored row still equals `expected`
        (no row at all when `expected` is None). Returns False when another
        writer got there first; the caller re-reads and re-validates.
        """

        raise NotImplementedError

    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
