from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class UserProfile:
    """Domain entity: a school user (teacher or head teacher).

    Note: plain data object, no storage access.
    """

    user_id: str
    name: str
    username: str
    password_hash: str
    role: Role
    notification_token: Optional[str] = None

    @property
    def is_head_teacher(self) -> bool:
        return self.role == Role.HEAD_TEACHER

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "username": self.username,
            "passwordHash": self.password_hash,
            "role": self.role.value,
            "fcmToken": self.notification_token,
        }

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "UserProfile":
        return cls(
            user_id=doc_id,
            name=data.get("name") or "Unnamed User",
            username=data.get("username") or "",
            password_hash=data.get("passwordHash") or "",
            role=Role.parse(data.get("role")),
            notification_token=data.get("fcmToken") or None,
        )

    def to_public_dict(self) -> dict:
        return {"id": self.user_id, "name": self.name, "role": self.role.value}
