from __future__ import annotations

import io
import logging
import re
import uuid
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image, UnidentifiedImageError
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import (
    normalize_middle_initial,
    normalize_student_identifier,
    require_min_length,
    require_non_empty,
)
from ..core import constants
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import Principal, Profile
from .repository import AdminDirectory, HeadshotRepository, UserRepository

logger = logging.getLogger(__name__)


def require_admin(principal: Optional[Principal]) -> Principal:
    if principal is None or not principal.is_admin:
        raise AuthorizationError()
    return principal


class AuthService:
    """Use case: authenticate a user and resolve their capabilities."""

    def __init__(self, users: UserRepository, admins: AdminDirectory):
        self._users = users
        self._admins = admins

    def _to_principal(self, profile: Profile) -> Principal:
        return Principal(
            user_id=profile.user_id,
            email=profile.email,
            display_name=profile.display_name,
            student_identifier=normalize_student_identifier(profile.trec_license),
            is_admin=bool(self._admins.is_admin(profile.user_id)),
        )

    def authenticate(self, email: str, password: str) -> Principal:
        profile = self._users.get_by_email((email or "").strip().lower())
        if not profile:
            raise AuthenticationError()

        try:
            ok = check_password_hash(profile.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError()
        return self._to_principal(profile)

    def principal_for(self, user_id: Optional[str]) -> Optional[Principal]:
        if not user_id:
            return None
        profile = self._users.get_by_id(str(user_id))
        if not profile:
            return None
        return self._to_principal(profile)


class AccountService:
    """Use case: self-service account creation."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_account(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        trec_license: str,
        middle_initial: Optional[str] = None,
    ) -> str:
        if not all(v and v.strip() for v in (email, password, first_name, last_name, trec_license)):
            raise ValidationError(
                "Missing required fields: email, password, first name, last name, TREC license."
            )

        email = require_non_empty(email, "Email").lower()
        if "@" not in email:
            raise ValidationError("Email is not valid.")
        require_min_length(password, "Password", constants.DEFAULT_MIN_PASSWORD_LENGTH)
        trec = normalize_student_identifier(trec_license)

        if self._users.get_by_email(email):
            raise ValidationError("An account with that email already exists.")
        if self._users.get_by_trec_license(trec):
            raise ValidationError("An account with that TREC license already exists.")

        profile = Profile(
            user_id=str(uuid.uuid4()),
            email=email,
            first_name=require_non_empty(first_name, "First name"),
            middle_initial=normalize_middle_initial(middle_initial),
            last_name=require_non_empty(last_name, "Last name"),
            trec_license=trec,
            password_hash=generate_password_hash(password),
        )
        user_id = self._users.create(profile)
        logger.info("Created account %s for license %s", user_id, trec)
        return user_id


class HeadshotService:
    """Stores uploaded headshots by TREC license and builds their public URL.

    Files land under `storage_dir` at the mapped path; `base_url` is where
    that directory is served from.
    """

    def __init__(
        self,
        headshots: HeadshotRepository,
        *,
        base_url: str = "",
        storage_dir: Optional[Union[str, Path]] = None,
    ):
        self._headshots = headshots
        self._base_url = base_url.rstrip("/")
        self._storage_dir = Path(storage_dir) if storage_dir else None

    @property
    def storage_dir(self) -> Optional[Path]:
        return self._storage_dir

    @staticmethod
    def path_for(trec_license: str, filename: str) -> str:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
        safe_ext = re.sub(r"[^a-z0-9]", "", ext) or "jpg"
        return f"headshots/{normalize_student_identifier(trec_license)}.{safe_ext}"

    def store_headshot(
        self,
        *,
        principal: Optional[Principal],
        trec_license: str,
        filename: str,
        stream: BinaryIO,
    ) -> str:
        require_admin(principal)
        if self._storage_dir is None:
            raise ValidationError("Headshot uploads are not configured.")

        trec = normalize_student_identifier(trec_license)
        path = self.path_for(trec, require_non_empty(filename, "Image file"))

        content = stream.read()
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError):
            raise ValidationError("That file is not an image.") from None

        target = self._storage_dir / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

        self._headshots.upsert(trec_license=trec, headshot_path=path)
        logger.info("Stored headshot for license %s at %s", trec, path)
        return path

    def headshot_url(self, trec_license: str) -> Optional[str]:
        path = self._headshots.get_path(normalize_student_identifier(trec_license))
        if not path:
            return None
        return f"{self._base_url}/{path}" if self._base_url else path
