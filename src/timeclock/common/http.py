"""Flask glue shared by every controller: auth guards and error rendering."""

from __future__ import annotations

from datetime import datetime
from functools import wraps

import structlog
from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError

logger = structlog.get_logger(__name__)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Authentication required")
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Authentication required")
        if session.get("role") != Role.ADMIN.value:
            raise AuthorizationError("Admin access required")
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _error_response(*, kind: str, message: str, status: int, extra: dict | None = None):
    payload = {
        "kind": kind,
        "message": message,
        "status": status,
        "timestamp": datetime.now().astimezone().isoformat(),
    }
    if extra:
        payload.update(extra)
    return jsonify({"error": payload}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        logger.warning(
            "request_failed",
            kind=exc.kind,
            message=exc.message,
            status=exc.status,
            path=request.path,
            method=request.method,
            user_id=session.get("user_id"),
        )
        body = exc.to_dict()
        kind = body.pop("kind")
        message = body.pop("message")
        return _error_response(kind=kind, message=message, status=exc.status, extra=body)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return _error_response(
            kind="http_error",
            message=exc.description or exc.name,
            status=int(exc.code or 500),
        )

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception(
            "request_crashed",
            path=request.path,
            method=request.method,
            user_id=session.get("user_id"),
        )
        extra = {"details": str(exc)} if app.config.get("DEBUG") else None
        return _error_response(
            kind="internal_error",
            message="An unexpected error occurred",
            status=500,
            extra=extra,
        )


def register_health_check(app: Flask) -> None:
    @app.route("/health", methods=["GET"], endpoint="health_check")
    def health_check():
        return jsonify(
            {
                "status": "ok",
                "message": "Time tracking API is running",
                "timestamp": datetime.now().astimezone().isoformat(),
            }
        )
