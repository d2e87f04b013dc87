from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import USERS_COLLECTION
from ..core.enums import Role
from ..database.document_store import DocumentStore
from .model import UserProfile
from .repository import UserRepository

# Domain attribute -> stored document field
_FIELD_NAMES = {
    "name": "name",
    "role": "role",
    "notification_token": "fcmToken",
    "password_hash": "passwordHash",
}


class DocumentUserRepository(UserRepository):
    def __init__(self, store: DocumentStore, *, collection: str = USERS_COLLECTION):
        self._store = store
        self._collection = collection

    def get_by_id(self, user_id: str) -> Optional[UserProfile]:
        doc = self._store.get(self._collection, user_id)
        return UserProfile.from_document(doc.doc_id, doc.data) if doc else None

    def get_by_username(self, username: str) -> Optional[UserProfile]:
        docs = self._store.query_equal(self._collection, {"username": username})
        return UserProfile.from_document(docs[0].doc_id, docs[0].data) if docs else None

    def create_user(self, *, name: str, username: str, password_hash: str, role: Role) -> str:
        profile = UserProfile(user_id="", name=name, username=username, password_hash=password_hash, role=role)
        return self._store.insert(self._collection, profile.to_document())

    def list_all(self) -> Sequence[UserProfile]:
        docs = self._store.query_range(self._collection, order_field="name", direction="asc")
        return [UserProfile.from_document(d.doc_id, d.data) for d in docs]

    def update_fields(self, user_id: str, **fields) -> None:
        payload = {}
        for key, value in fields.items():
            if key not in _FIELD_NAMES:
                raise ValueError(f"Unknown user field: {key}")
            payload[_FIELD_NAMES[key]] = value.value if isinstance(value, Role) else value
        self._store.update(self._collection, user_id, payload)
