from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..core import constants
from ..core.enums import WindowPolicyName
from ..core.exceptions import ValidationError
from .policies.base import WindowPolicy
from .policies.fixed_expiry_policy import FixedExpiryWindowPolicy
from .policies.offset_policy import OffsetWindowPolicy


@dataclass
class WindowPolicyFactory:
    """Factory Pattern: choose the window policy named in settings."""

    def for_name(self, name: str, settings: Mapping[str, Any] | None = None) -> WindowPolicy:
        settings = settings or {}
        try:
            policy_name = WindowPolicyName(str(name).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown window policy: {name!r}") from None

        if policy_name == WindowPolicyName.FIXED_EXPIRY:
            return FixedExpiryWindowPolicy(
                checkin_expiry_after_start=settings.get(
                    "FIXED_CHECKIN_EXPIRY_MINUTES", constants.FIXED_CHECKIN_EXPIRY_MINUTES
                ),
                checkout_expiry_after_end=settings.get(
                    "FIXED_CHECKOUT_EXPIRY_MINUTES", constants.FIXED_CHECKOUT_EXPIRY_MINUTES
                ),
            )

        return OffsetWindowPolicy(
            checkin_open_before=settings.get("CHECKIN_OPEN_BEFORE_MINUTES", constants.CHECKIN_OPEN_BEFORE_MINUTES),
            checkin_close_after=settings.get("CHECKIN_CLOSE_AFTER_MINUTES", constants.CHECKIN_CLOSE_AFTER_MINUTES),
            checkout_open_before=settings.get("CHECKOUT_OPEN_BEFORE_MINUTES", constants.CHECKOUT_OPEN_BEFORE_MINUTES),
            checkout_close_after=settings.get("CHECKOUT_CLOSE_AFTER_MINUTES", constants.CHECKOUT_CLOSE_AFTER_MINUTES),
        )
