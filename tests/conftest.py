from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Optional

import pytest
from PIL import Image
from werkzeug.security import generate_password_hash

from ce_attendance.attendance.model import AttendanceRecord
from ce_attendance.sessions.model import ClassSession
from ce_attendance.sessions.policies.offset_policy import OffsetWindowPolicy
from ce_attendance.users.model import Principal, Profile

START = datetime(2026, 2, 1, 9, 0, 0, tzinfo=timezone.utc)
END = datetime(2026, 2, 1, 17, 0, 0, tzinfo=timezone.utc)


class InMemorySessions:
    def __init__(self, *sessions: ClassSession):
        self._by_id = {s.session_id: s for s in sessions}

    def get_by_id(self, session_id: str) -> Optional[ClassSession]:
        return self._by_id.get(session_id)

    def list_active(self, *, now: datetime):
        items = [s for s in self._by_id.values() if s.ends_at >= now]
        items.sort(key=lambda s: s.starts_at)
        return items

    def create(self, session: ClassSession) -> str:
        self._by_id[session.session_id] = session
        return session.session_id


class InMemoryAttendance:
    """Compare-and-swap store keyed by (session_id, student_identifier)."""

    def __init__(self):
        self.rows: dict[tuple[str, str], AttendanceRecord] = {}
        self.saves = 0

    def get(self, session_id: str, student_identifier: str) -> Optional[AttendanceRecord]:
        return self.rows.get((session_id, student_identifier))

    def save(self, record: AttendanceRecord, *, expected: Optional[AttendanceRecord]) -> bool:
        key = (record.session_id, record.student_identifier)
        if self.rows.get(key) != expected:
            return False
        self.rows[key] = record
        self.saves += 1
        return True

    def list_for_session(self, session_id: str):
        return [r for (sid, _), r in self.rows.items() if sid == session_id]


class InMemoryRoster:
    def __init__(self, entries: Optional[dict[str, set[str]]] = None):
        self.entries = {k: set(v) for k, v in (entries or {}).items()}

    def is_on_roster(self, session_id: str, student_identifier: str) -> bool:
        return student_identifier in self.entries.get(session_id, set())

    def add(self, session_id: str, student_identifier: str) -> bool:
        members = self.entries.setdefault(session_id, set())
        if student_identifier in members:
            return False
        members.add(student_identifier)
        return True

    def remove(self, session_id: str, student_identifier: str) -> bool:
        members = self.entries.get(session_id, set())
        if student_identifier not in members:
            return False
        members.remove(student_identifier)
        return True

    def list_for_session(self, session_id: str):
        return sorted(self.entries.get(session_id, set()))


class InMemoryUsers:
    def __init__(self, *profiles: Profile):
        self.by_id = {p.user_id: p for p in profiles}

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        return self.by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[Profile]:
        return next((p for p in self.by_id.values() if p.email == email), None)

    def get_by_trec_license(self, trec_license: str) -> Optional[Profile]:
        return next((p for p in self.by_id.values() if p.trec_license == trec_license), None)

    def create(self, profile: Profile) -> str:
        self.by_id[profile.user_id] = profile
        return profile.user_id


class InMemoryAdmins:
    def __init__(self, *user_ids: str):
        self.user_ids = set(user_ids)

    def is_admin(self, user_id: str) -> bool:
        return user_id in self.user_ids


class InMemoryHeadshots:
    def __init__(self):
        self.paths: dict[str, str] = {}

    def get_path(self, trec_license: str) -> Optional[str]:
        return self.paths.get(trec_license)

    def upsert(self, *, trec_license: str, headshot_path: str) -> None:
        self.paths[trec_license] = headshot_path


def make_session(**overrides) -> ClassSession:
    values = dict(
        session_id="sess-1",
        title="Real Estate Law Update",
        starts_at=START,
        ends_at=END,
        checkin_code="CHK7KQ2MZP",
        checkout_code="XUT4XW9RTB",
    )
    values.update(overrides)
    return ClassSession(**values)


def make_profile(user_id: str = "u-student", **overrides) -> Profile:
    values = dict(
        user_id=user_id,
        email="pat@example.com",
        first_name="Pat",
        middle_initial="Q",
        last_name="Realtor",
        trec_license="0654321",
        password_hash=generate_password_hash("secret123"),
    )
    values.update(overrides)
    return Profile(**values)


@pytest.fixture
def class_session() -> ClassSession:
    return make_session()


@pytest.fixture
def policy() -> OffsetWindowPolicy:
    return OffsetWindowPolicy()


@pytest.fixture
def student() -> Principal:
    return Principal(
        user_id="u-student",
        email="pat@example.com",
        display_name="Pat Q. Realtor",
        student_identifier="0654321",
    )


@pytest.fixture
def admin() -> Principal:
    return Principal(
        user_id="u-admin",
        email="teacher@example.com",
        display_name="Terry Teacher",
        student_identifier="staff-1",
        is_admin=True,
    )


def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), "navy").save(buf, format="PNG")
    return buf.getvalue()
