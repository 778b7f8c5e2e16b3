from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_form_instant, to_iso_instant
from ..common.web import admin_required, current_principal, error_response, login_required, server_error_response
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .model import ClassSession

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _iso(value):
        return to_iso_instant(value) if value else None

    def _session_json(s: ClassSession) -> dict:
        windows = container.session_service.windows_for(s)
        return {
            "id": s.session_id,
            "title": s.title,
            "starts_at": _iso(s.starts_at),
            "ends_at": _iso(s.ends_at),
            "checkin_opens_at": _iso(windows.checkin_opens_at),
            "checkin_closes_at": _iso(windows.checkin_closes_at),
            "checkout_opens_at": _iso(windows.checkout_opens_at),
            "checkout_closes_at": _iso(windows.checkout_closes_at),
        }

    @app.route("/api/sessions/active", methods=["GET"], endpoint="active_sessions")
    @login_required(container)
    def active_sessions():
        sessions = container.session_service.list_active()
        return jsonify({"sessions": [_session_json(s) for s in sessions]})

    @app.route("/admin/sessions", methods=["POST"], endpoint="admin_create_session")
    @admin_required(container)
    def admin_create_session():
        data = request.get_json(silent=True) or request.form.to_dict()
        tz_name = app.config.get("SCHOOL_TIMEZONE", "UTC")
        try:
            try:
                starts_at = parse_form_instant(data.get("starts_at") or "", tz_name=tz_name)
                ends_at = parse_form_instant(data.get("ends_at") or "", tz_name=tz_name)
            except ValueError:
                raise ValidationError("Missing or invalid title/start/end.") from None

            created = container.session_service.create_session(
                principal=current_principal(container),
                title=data.get("title", ""),
                starts_at=starts_at,
                ends_at=ends_at,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Session creation failed unexpectedly")
            return server_error_response("System error while creating the session.")

        body = _session_json(created)
        body.update({"checkin_code": created.checkin_code, "checkout_code": created.checkout_code})
        return jsonify({"success": True, "session": body}), 201

    @app.route("/admin/sessions/<session_id>/payload/<action>", methods=["GET"], endpoint="admin_session_payload")
    @admin_required(container)
    def admin_session_payload(session_id: str, action: str):
        try:
            payload = container.session_service.build_payload(container.session_service.get(session_id), action)
        except DomainError as e:
            return error_response(e)
        return jsonify(payload.to_dict())

    @app.route("/admin/sessions/<session_id>/qr/<action>.png", methods=["GET"], endpoint="admin_session_qr")
    @admin_required(container)
    def admin_session_qr(session_id: str, action: str):
        """QR image an instructor projects for students to scan."""
        try:
            png = container.session_service.render_qr_png(
                principal=current_principal(container),
                session_id=session_id,
                action=action,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("QR rendering failed for session %s", session_id)
            return server_error_response("System error while rendering the QR code.")

        return send_file(io.BytesIO(png), mimetype="image/png")
