from __future__ import annotations

import structlog
from flask import Flask, jsonify, session

from ..common.http import admin_required, json_body, login_required
from ..container import Container

logger = structlog.get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/v1/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value
        logger.info("user_logged_in", user_id=s_user.user_id, role=s_user.role.value)

        return jsonify(
            {
                "message": "Successfully logged in",
                "user": {"id": s_user.user_id, "name": s_user.name, "email": s_user.email, "role": s_user.role.value},
            }
        )

    @app.route("/api/v1/auth/logout", methods=["DELETE"], endpoint="auth_logout")
    @login_required
    def logout():
        session.clear()
        return jsonify({"message": "Successfully logged out"})

    @app.route("/api/v1/admin/users", methods=["GET"], endpoint="admin_users")
    @admin_required
    def admin_users():
        return jsonify({"users": container.user_service.list_admin_view()})
