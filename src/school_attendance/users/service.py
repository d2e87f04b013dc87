from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, RecordNotFoundError, ValidationError
from .model import UserProfile
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: str
    name: str
    role: Role


class AuthService:
    """Use case: resolve credentials to a stable user identifier."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.user_id, name=user.name, role=user.role)


class UserService:
    """Use cases: user profiles, roles and notification tokens."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _require(self, user_id: str) -> UserProfile:
        user = self._users.get_by_id(user_id)
        if not user:
            raise RecordNotFoundError("User not found")
        return user

    def get(self, user_id: str) -> UserProfile:
        return self._require(user_id)

    def create_account(self, *, name: str, username: str, password: str, role: Role = Role.TEACHER) -> str:
        name = require_non_empty(name, "Name")
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", 6)

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        user_id = self._users.create_user(
            name=name,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
        )
        logger.info("Created %s account %s (%s)", role.value, username, user_id)
        return user_id

    def find(self, user_id: str) -> Optional[UserProfile]:
        return self._users.get_by_id(user_id)

    def find_by_username(self, username: str) -> Optional[UserProfile]:
        return self._users.get_by_username(username)

    def list_users(self) -> list[UserProfile]:
        return sorted(self._users.list_all(), key=lambda u: u.name.lower())

    def teacher_names(self) -> dict[str, str]:
        """teacher id -> display name, used by attendance tables and reports."""
        return {u.user_id: u.name for u in self._users.list_all()}

    def update_role(self, *, actor_role: Role, user_id: str, role: Union[Role, str]) -> UserProfile:
        if actor_role != Role.HEAD_TEACHER:
            raise AuthorizationError("Only head teachers can change roles")

        try:
            new_role = Role(role)
        except ValueError:
            raise ValidationError(f"Unknown role: {role}")

        user = self._require(user_id)
        self._users.update_fields(user_id, role=new_role)
        logger.info("Role of %s changed from %s to %s", user_id, user.role.value, new_role.value)
        return replace(user, role=new_role)

    def update_name(self, user_id: str, name: str) -> str:
        name = require_non_empty(name, "Name")
        self._require(user_id)
        self._users.update_fields(user_id, name=name)
        return name

    def register_notification_token(self, user_id: str, token: str) -> None:
        token = require_non_empty(token, "Notification token")
        self._require(user_id)
        self._users.update_fields(user_id, notification_token=token)
        logger.info("Notification token stored for user %s", user_id)

    def notification_targets(self, *, exclude_user_id: Optional[str] = None) -> list[str]:
        return [
            u.notification_token
            for u in self._users.list_all()
            if u.notification_token and u.user_id != exclude_user_id
        ]
