from __future__ import annotations

import csv
import io
import logging
from dataclasses import asdict
from typing import Optional

from flask import Flask, jsonify, request
from PIL import Image, UnidentifiedImageError

from ..common.datetime_utils import to_iso_instant
from ..common.web import admin_required, current_principal, error_response, login_required, server_error_response
from ..core.exceptions import DomainError, MalformedPayload, ValidationError
from ..container import Container
from .model import AttendanceRecord

logger = logging.getLogger(__name__)

_SUCCESS_MESSAGES = {
    "checkin": "Checked in ✅",
    "checkout": "Checked out ✅",
}


def _record_json(record: Optional[AttendanceRecord]) -> Optional[dict]:
    if record is None:
        return None
    return {
        "session_id": record.session_id,
        "student_identifier": record.student_identifier,
        "state": record.state.value,
        "checkin_at": to_iso_instant(record.checkin_at) if record.checkin_at else None,
        "checkout_at": to_iso_instant(record.checkout_at) if record.checkout_at else None,
        "method_checkin": record.method_checkin.value if record.method_checkin else None,
        "method_checkout": record.method_checkout.value if record.method_checkout else None,
    }


def decode_qr_image(stream) -> str:
    """First QR code found in an uploaded image, as text."""
    # pyzbar loads the zbar shared library on import; only image scans need it.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise ValidationError("That file is not an image.") from None

    decoded = pyzbar_decode(img)
    if not decoded:
        raise MalformedPayload("No QR code was found in that image.")
    try:
        return decoded[0].data.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise MalformedPayload() from None


def register(app: Flask, container: Container) -> None:
    def _selected_session_id(data: dict) -> Optional[str]:
        # Fall back to the first active session, as the session picker does.
        session_id = (data.get("session_id") or "").strip()
        if session_id:
            return session_id
        active = container.session_service.list_active()
        return active[0].session_id if active else None

    def _scan(payload: str, data: dict):
        record = container.attendance_service.scan(
            principal=current_principal(container),
            session_id=_selected_session_id(data),
            payload=payload,
        )
        action = "checkout" if record.checkout_at else "checkin"
        return jsonify({"success": True, "message": _SUCCESS_MESSAGES[action], "record": _record_json(record)})

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    @login_required(container)
    def api_scan():
        """Decoded QR text from the browser camera."""
        data = request.get_json(silent=True) or request.form.to_dict()
        try:
            return _scan(data.get("payload") or "", data)
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Scan failed unexpectedly")
            return server_error_response("System error while recording attendance.")

    @app.route("/api/scan/image", methods=["POST"], endpoint="api_scan_image")
    @login_required(container)
    def api_scan_image():
        """Photo of the QR code, for devices where live scanning fails."""
        data = request.form.to_dict()
        try:
            upload = request.files.get("file")
            if not upload:
                raise ValidationError("Choose a photo of the QR code.")
            return _scan(decode_qr_image(upload.stream), data)
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Image scan failed unexpectedly")
            return server_error_response("System error while recording attendance.")

    @app.route("/api/sessions/<session_id>/me", methods=["GET"], endpoint="my_attendance")
    @login_required(container)
    def my_attendance(session_id: str):
        record = container.attendance_service.my_record(principal=current_principal(container), session_id=session_id)
        return jsonify({"record": _record_json(record)})

    @app.route("/admin/sessions/<session_id>/manual", methods=["POST"], endpoint="admin_manual")
    @admin_required(container)
    def admin_manual(session_id: str):
        data = request.get_json(silent=True) or request.form.to_dict()
        try:
            record = container.attendance_service.manual(
                principal=current_principal(container),
                session_id=session_id,
                student_identifier=data.get("student_identifier", ""),
                action=data.get("action", ""),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Manual override failed for session %s", session_id)
            return server_error_response("System error while recording attendance.")

        return jsonify({"success": True, "record": _record_json(record)})

    @app.route("/admin/sessions/<session_id>/undo", methods=["POST"], endpoint="admin_undo")
    @admin_required(container)
    def admin_undo(session_id: str):
        data = request.get_json(silent=True) or request.form.to_dict()
        try:
            record = container.attendance_service.undo(
                principal=current_principal(container),
                session_id=session_id,
                student_identifier=data.get("student_identifier", ""),
                action=data.get("action", ""),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Undo failed for session %s", session_id)
            return server_error_response("System error while updating attendance.")

        return jsonify({"success": True, "record": _record_json(record)})

    @app.route("/admin/sessions/<session_id>/attendance", methods=["GET"], endpoint="admin_attendance")
    @admin_required(container)
    def admin_attendance(session_id: str):
        try:
            rows = container.attendance_service.list_session_ui(
                principal=current_principal(container),
                session_id=session_id,
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"rows": [asdict(r) for r in rows]})

    @app.route("/admin/sessions/<session_id>/attendance.csv", methods=["GET"], endpoint="admin_attendance_csv")
    @admin_required(container)
    def admin_attendance_csv(session_id: str):
        try:
            rows = container.attendance_service.list_session_ui(
                principal=current_principal(container),
                session_id=session_id,
            )
        except DomainError as e:
            return error_response(e)

        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=[
                "student_identifier",
                "display_name",
                "state",
                "checkin_at",
                "checkout_at",
                "method_checkin",
                "method_checkout",
            ],
            extrasaction="ignore",
        )
        writer.writeheader()
        for row in rows:
            writer.writerow(asdict(row))

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=attendance_{session_id}.csv"},
        )
