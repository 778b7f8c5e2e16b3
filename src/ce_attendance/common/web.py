from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Optional

from flask import g, jsonify, session

from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AuthenticationError,
    AuthorizationError,
    ConcurrentUpdate,
    DomainError,
    RecordNotFound,
    SessionNotFound,
)

if TYPE_CHECKING:
    from ..container import Container
    from ..users.model import Principal

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (SessionNotFound, 404),
    (RecordNotFound, 404),
    (AlreadyCheckedIn, 409),
    (AlreadyCheckedOut, 409),
    (ConcurrentUpdate, 409),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def error_response(error: DomainError):
    return jsonify({"success": False, "error": error.code, "message": error.message}), status_for(error)


def server_error_response(message: str):
    return jsonify({"success": False, "error": "server_error", "message": message}), 500


def current_principal(container: "Container") -> Optional["Principal"]:
    if "principal" not in g:
        g.principal = container.auth_service.principal_for(session.get("user_id"))
    return g.principal


def login_required(container: "Container"):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_principal(container) is None:
                return error_response(AuthenticationError("Please sign in to continue."))
            return view(*args, **kwargs)

        return wrapper

    return decorator


def admin_required(container: "Container"):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            principal = current_principal(container)
            if principal is None:
                return error_response(AuthenticationError("Please sign in to continue."))
            if not principal.is_admin:
                return error_response(AuthorizationError())
            return view(*args, **kwargs)

        return wrapper

    return decorator
