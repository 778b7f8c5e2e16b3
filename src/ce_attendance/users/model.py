from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Profile:
    """Domain entity: a student or instructor account.

    Note: Plain data object (no DB access code).
    """

    user_id: str
    email: str
    first_name: str
    last_name: str
    trec_license: str
    password_hash: str
    middle_initial: Optional[str] = None

    @property
    def display_name(self) -> str:
        mi = f" {self.middle_initial}." if self.middle_initial else ""
        return f"{self.first_name}{mi} {self.last_name}".strip()


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, with its admin capability resolved."""

    user_id: str
    email: str
    display_name: str
    student_identifier: str
    is_admin: bool = False

    @property
    def role(self) -> Role:
        return Role.ADMIN if self.is_admin else Role.STUDENT

    @property
    def identifiers(self) -> tuple[str, ...]:
        """Every identifier a roster may list this person under, license first."""
        return tuple(v for v in (self.student_identifier, self.email) if v)
