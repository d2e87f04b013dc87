from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, jsonify, session

from ..common.web import current_user, head_teacher_required, json_body, login_required
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        logger.info("User %s signed in as %s", s_user.user_id, s_user.role.value)
        return jsonify({
            "success": True,
            "message": "Signed in successfully!",
            "user": {"id": s_user.user_id, "name": s_user.name, "role": s_user.role.value},
        })

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        user_id = session.get("user_id")
        if user_id:
            container.projections.drop(str(user_id))
        session.clear()
        return jsonify({"success": True, "message": "Signed out."})

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @head_teacher_required
    def users_list():
        users = container.user_service.list_users()
        return jsonify({"success": True, "users": [u.to_public_dict() for u in users]})

    @app.route("/api/users/<user_id>/role", methods=["PUT"], endpoint="users_update_role")
    @head_teacher_required
    def users_update_role(user_id: str):
        user = container.user_service.update_role(
            actor_role=current_user().role,
            user_id=user_id,
            role=json_body().get("role", ""),
        )
        return jsonify({"success": True, "message": "Role updated.", "user": user.to_public_dict()})

    @app.route("/api/me/name", methods=["PUT"], endpoint="me_update_name")
    @login_required
    def me_update_name():
        name = container.user_service.update_name(current_user().user_id, json_body().get("name", ""))
        session["name"] = name
        return jsonify({"success": True, "message": "Name updated.", "name": name})

    @app.route("/api/me/notification-token", methods=["POST"], endpoint="me_notification_token")
    @login_required
    def me_notification_token():
        container.user_service.register_notification_token(current_user().user_id, json_body().get("token", ""))
        return jsonify({"success": True, "message": "Notifications enabled."})
