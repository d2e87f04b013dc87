from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import UserProfile


class UserRepository(Protocol):
    """Repository interface for user profiles.

    Note (DIP): the service layer depends on this interface, not on a concrete store.
    """

    def get_by_id(self, user_id: str) -> Optional[UserProfile]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[UserProfile]:
        raise NotImplementedError

    def create_user(self, *, name: str, username: str, password_hash: str, role: Role) -> str:
        raise NotImplementedError

    def list_all(self) -> Sequence[UserProfile]:
        raise NotImplementedError

    def update_fields(self, user_id: str, **fields) -> None:
        raise NotImplementedError
