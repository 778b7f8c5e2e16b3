from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for authorization."""

    ADMIN = "admin"
    STUDENT = "student"


class AttendanceAction(str, Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"


class CheckMethod(str, Enum):
    """How an attendance timestamp was recorded."""

    SCAN = "scan"
    MANUAL = "manual"


class AttendanceState(str, Enum):
    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"


class WindowPolicyName(str, Enum):
    OFFSETS = "offsets"
    FIXED_EXPIRY = "fixed_expiry"
