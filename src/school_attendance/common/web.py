from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendUnavailableError,
    RecordNotFoundError,
    ValidationError,
)
from ..users.service import SessionUser, UserService
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please sign in to continue.", 401)
        return view(*args, **kwargs)

    return wrapper


def head_teacher_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please sign in to continue.", 401)
        if session.get("role") != Role.HEAD_TEACHER.value:
            return fail("Head teacher access required.", 403)
        return view(*args, **kwargs)

    return wrapper


def current_user() -> SessionUser:
    return SessionUser(
        user_id=str(session["user_id"]),
        name=str(session.get("name") or ""),
        role=Role.parse(session.get("role")),
    )


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def date_arg(name: str) -> Optional[date]:
    value = (request.args.get(name) or "").strip()
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid date for '{name}', expected YYYY-MM-DD")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e):
        return fail(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _authentication(e):
        return fail(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _authorization(e):
        return fail(str(e), 403)

    @app.errorhandler(RecordNotFoundError)
    def _not_found(e):
        return fail(str(e), 404)

    @app.errorhandler(BackendUnavailableError)
    def _unavailable(e):
        logger.warning("Backend unavailable: %s", e)
        return fail("The service is temporarily unavailable. Please try again.", 503)


def register_session_refresh(app: Flask, user_service: UserService) -> None:
    """Reload the signed-in user's profile before every request.

    Role checks read the session, so the stored role and name are replaced by
    the profile's current values. A deleted profile ends the session. While
    the store is unreachable the last confirmed values are kept.
    """

    @app.before_request
    def _refresh_session_user():
        user_id = session.get("user_id")
        if user_id is None:
            return None
        try:
            profile = user_service.find(str(user_id))
        except BackendUnavailableError as exc:
            logger.warning("Could not reload profile %s, keeping last known role: %s", user_id, exc)
            return None

        if profile is None:
            logger.info("Signed-in user %s no longer exists, clearing session", user_id)
            session.clear()
            return None
        if session.get("role") != profile.role.value:
            logger.info("Role of signed-in user %s is now %s", user_id, profile.role.value)
            session["role"] = profile.role.value
        if session.get("name") != profile.name:
            session["name"] = profile.name
        return None
