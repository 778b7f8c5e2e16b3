from __future__ import annotations

import logging

from flask import Flask, abort, jsonify, request, send_from_directory, session

from ..common.web import admin_required, current_principal, error_response, login_required, server_error_response
from ..core.exceptions import DomainError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def _form() -> dict:
    return request.get_json(silent=True) or request.form.to_dict()


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = _form()
        try:
            principal = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Login failed unexpectedly")
            return server_error_response("System error while signing in.")

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        session["user_id"] = principal.user_id
        return jsonify({"success": True, "name": principal.display_name, "is_admin": principal.is_admin})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/signup", methods=["POST"], endpoint="signup")
    def signup():
        data = _form()
        try:
            user_id = container.account_service.create_account(
                email=data.get("email", ""),
                password=data.get("password", ""),
                first_name=data.get("first_name", ""),
                middle_initial=data.get("middle_initial"),
                last_name=data.get("last_name", ""),
                trec_license=data.get("trec_license", ""),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Account creation failed unexpectedly")
            return server_error_response("System error while creating the account.")

        return jsonify({"success": True, "user_id": user_id, "message": "Account created. You can now sign in."}), 201

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required(container)
    def me():
        principal = current_principal(container)
        return jsonify(
            {
                "user_id": principal.user_id,
                "email": principal.email,
                "name": principal.display_name,
                "trec_license": principal.student_identifier,
                "is_admin": principal.is_admin,
                "headshot_url": container.headshot_service.headshot_url(principal.student_identifier),
            }
        )

    @app.route("/admin/headshots", methods=["POST"], endpoint="admin_headshots")
    @admin_required(container)
    def admin_headshots():
        data = request.form.to_dict()
        upload = request.files.get("file")
        try:
            if not upload:
                raise ValidationError("Choose an image file.")
            path = container.headshot_service.store_headshot(
                principal=current_principal(container),
                trec_license=data.get("trec_license", ""),
                filename=upload.filename or "",
                stream=upload.stream,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Headshot mapping failed unexpectedly")
            return server_error_response("System error while saving the headshot.")

        return jsonify({"success": True, "headshot_path": path})

    @app.route("/media/<path:filename>", methods=["GET"], endpoint="media")
    @login_required(container)
    def media(filename: str):
        """Stored headshots, for deployments where HEADSHOT_BASE_URL points here."""
        storage_dir = container.headshot_service.storage_dir
        if storage_dir is None:
            abort(404)
        return send_from_directory(storage_dir, filename)
