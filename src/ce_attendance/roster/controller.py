from __future__ import annotations

import logging
import re

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_principal, error_response, server_error_response
from ..core.exceptions import DomainError
from ..container import Container

logger = logging.getLogger(__name__)


def _identifiers(data: dict) -> list[str]:
    value = data.get("student_identifiers")
    if isinstance(value, list):
        return [str(v) for v in value]
    # Pasted text: one license/email per line, or comma separated.
    return re.split(r"[\s,;]+", str(value or data.get("student_identifier") or ""))


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/sessions/<session_id>/roster", methods=["GET", "POST"], endpoint="admin_roster")
    @admin_required(container)
    def admin_roster(session_id: str):
        principal = current_principal(container)
        try:
            if request.method == "POST":
                data = request.get_json(silent=True) or request.form.to_dict()
                added = container.roster_service.add_students(
                    principal=principal,
                    session_id=session_id,
                    student_identifiers=_identifiers(data),
                )
                return jsonify({"success": True, "added": added}), 201

            students = container.roster_service.list_roster(principal=principal, session_id=session_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Roster update failed for session %s", session_id)
            return server_error_response("System error while updating the roster.")

        return jsonify({"students": list(students)})

    @app.route("/admin/sessions/<session_id>/roster/remove", methods=["POST"], endpoint="admin_roster_remove")
    @admin_required(container)
    def admin_roster_remove(session_id: str):
        data = request.get_json(silent=True) or request.form.to_dict()
        try:
            container.roster_service.remove_student(
                principal=current_principal(container),
                session_id=session_id,
                student_identifier=data.get("student_identifier", ""),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Roster removal failed for session %s", session_id)
            return server_error_response("System error while updating the roster.")

        return jsonify({"success": True})
