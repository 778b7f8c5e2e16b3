"""QR payload wire format.

Printed and displayed QR codes carry exactly::

    {"action": "checkin"|"checkout", "sessionId": str, "code": str, "expiresAt": ISO-8601}

Parsing fails closed: missing, extra or mistyped fields are rejected.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..common.datetime_utils import parse_iso_instant, to_iso_instant
from ..core.exceptions import MalformedPayload

PAYLOAD_FIELDS = ("action", "sessionId", "code", "expiresAt")


@dataclass(frozen=True)
class ScanPayload:
    # action stays a plain string here; unknown values are rejected later,
    # after the session match.
    action: str
    session_id: str
    code: str
    expires_at: datetime

    def __post_init__(self):
        # The wire format carries millisecond precision.
        ms = self.expires_at.microsecond // 1000 * 1000
        object.__setattr__(self, "expires_at", self.expires_at.replace(microsecond=ms))

    def to_dict(self) -> dict[str, str]:
        return {
            "action": self.action,
            "sessionId": self.session_id,
            "code": self.code,
            "expiresAt": to_iso_instant(self.expires_at),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


def parse_scan_payload(raw: Any) -> ScanPayload:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedPayload() from None
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedPayload()

    try:
        data = json.loads(raw)
    except ValueError:
        raise MalformedPayload() from None

    if not isinstance(data, dict) or set(data) != set(PAYLOAD_FIELDS):
        raise MalformedPayload()
    if not all(isinstance(data[k], str) and data[k] for k in PAYLOAD_FIELDS):
        raise MalformedPayload()

    try:
        expires_at = parse_iso_instant(data["expiresAt"])
    except ValueError:
        raise MalformedPayload() from None

    return ScanPayload(
        action=data["action"],
        session_id=data["sessionId"],
        code=data["code"],
        expires_at=expires_at,
    )
