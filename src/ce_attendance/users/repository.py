from __future__ import annotations

from typing import Optional, Protocol

from .model import Profile


class UserRepository(Protocol):
    """Repository interface for profiles.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_trec_license(self, trec_license: str) -> Optional[Profile]:
        raise NotImplementedError

    def create(self, profile: Profile) -> str:
        raise NotImplementedError


class AdminDirectory(Protocol):
    """Answers "is this principal an administrator?"."""

    def is_admin(self, user_id: str) -> bool:
        raise NotImplementedError


class HeadshotRepository(Protocol):
    def get_path(self, trec_license: str) -> Optional[str]:
        raise NotImplementedError

    def upsert(self, *, trec_license: str, headshot_path: str) -> None:
        raise NotImplementedError
