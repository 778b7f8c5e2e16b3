from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from ce_attendance.attendance.payload import ScanPayload, parse_scan_payload
from ce_attendance.core.exceptions import MalformedPayload

VALID = {
    "action": "checkin",
    "sessionId": "sess-1",
    "code": "CHK7KQ2MZP",
    "expiresAt": "2026-02-01T09:30:00.000Z",
}


def test_json_round_trip_is_field_for_field():
    payload = ScanPayload(
        action="checkout",
        session_id="7d1f6c1e-2b1a-4a59-9d8e-0c7b3f1e2a44",
        code="XUT4XW9RTB",
        expires_at=datetime(2026, 2, 1, 18, 0, 0, 250000, tzinfo=timezone.utc),
    )

    assert parse_scan_payload(payload.to_json()) == payload


def test_sub_millisecond_expiry_still_round_trips():
    payload = ScanPayload(
        action="checkin",
        session_id="sess-1",
        code="CHK7KQ2MZP",
        expires_at=datetime(2026, 2, 1, 9, 30, 0, 123456, tzinfo=timezone.utc),
    )

    assert payload.expires_at.microsecond == 123000
    assert parse_scan_payload(payload.to_json()) == payload


def test_wire_shape_has_exactly_four_keys():
    payload = parse_scan_payload(json.dumps(VALID))

    assert payload.to_dict() == VALID


def test_accepts_offsets_and_bytes():
    raw = json.dumps(dict(VALID, expiresAt="2026-02-01T03:30:00-06:00")).encode("utf-8")

    payload = parse_scan_payload(raw)

    assert payload.expires_at == datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)


def test_unknown_action_text_is_left_for_later_checks():
    assert parse_scan_payload(json.dumps(dict(VALID, action="lunch"))).action == "lunch"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "CHK7KQ2MZP",
        "[1, 2]",
        "{not json",
        json.dumps({k: v for k, v in VALID.items() if k != "code"}),
        json.dumps(dict(VALID, extra="x")),
        json.dumps(dict(VALID, sessionId=42)),
        json.dumps(dict(VALID, code=None)),
        json.dumps(dict(VALID, code="")),
        json.dumps(dict(VALID, expiresAt="tomorrow")),
        json.dumps(dict(VALID, expiresAt="2026-02-01T09:30:00")),
        None,
        b"\xff\xfe",
    ],
)
def test_rejects_anything_but_the_exact_schema(raw):
    with pytest.raises(MalformedPayload):
        parse_scan_payload(raw)
