from __future__ import annotations

import pytest

from school_attendance.core.enums import Role
from school_attendance.core.exceptions import AuthenticationError, AuthorizationError, RecordNotFoundError, ValidationError
from school_attendance.users.document_user_repository import DocumentUserRepository
from school_attendance.users.seed import DEMO_USERS, ensure_demo_users
from school_attendance.users.service import AuthService


@pytest.fixture
def auth(store):
    return AuthService(DocumentUserRepository(store))


def test_authenticate_with_valid_credentials(user_service, auth):
    user_id = user_service.create_account(name="Alice", username="alice", password="secret1")

    s_user = auth.authenticate("  alice ", "secret1")

    assert s_user.user_id == user_id
    assert s_user.name == "Alice"
    assert s_user.role == Role.TEACHER


@pytest.mark.parametrize("username,password", [("alice", "wrong"), ("bob", "secret1"), ("", "")])
def test_authenticate_rejects_bad_credentials(user_service, auth, username, password):
    user_service.create_account(name="Alice", username="alice", password="secret1")

    with pytest.raises(AuthenticationError):
        auth.authenticate(username, password)


def test_placeholder_hash_never_authenticates(store, auth):
    store.insert("users", {"name": "Legacy", "username": "legacy", "passwordHash": "CHANGE_ME", "role": "teacher"})

    with pytest.raises(AuthenticationError):
        auth.authenticate("legacy", "CHANGE_ME")


def test_create_account_validation(user_service):
    user_service.create_account(name="Alice", username="alice", password="secret1")

    with pytest.raises(ValidationError):
        user_service.create_account(name="Other", username="alice", password="secret1")
    with pytest.raises(ValidationError):
        user_service.create_account(name="Bob", username="bob", password="123")
    with pytest.raises(ValidationError):
        user_service.create_account(name=" ", username="bob", password="secret1")


def test_profile_defaults_for_missing_fields(store, user_service):
    user_id = store.insert("users", {"username": "ghost"})

    profile = user_service.get(user_id)

    assert profile.name == "Unnamed User"
    assert profile.role == Role.TEACHER
    assert profile.notification_token is None


def test_only_head_teacher_changes_roles(user_service):
    user_id = user_service.create_account(name="Alice", username="alice", password="secret1")

    with pytest.raises(AuthorizationError):
        user_service.update_role(actor_role=Role.TEACHER, user_id=user_id, role="headTeacher")
    assert user_service.get(user_id).role == Role.TEACHER

    updated = user_service.update_role(actor_role=Role.HEAD_TEACHER, user_id=user_id, role="headTeacher")

    assert updated.role == Role.HEAD_TEACHER
    assert user_service.get(user_id).is_head_teacher


def test_update_role_rejects_unknown_role_and_user(user_service):
    user_id = user_service.create_account(name="Alice", username="alice", password="secret1")

    with pytest.raises(ValidationError):
        user_service.update_role(actor_role=Role.HEAD_TEACHER, user_id=user_id, role="principal")
    with pytest.raises(RecordNotFoundError):
        user_service.update_role(actor_role=Role.HEAD_TEACHER, user_id="missing", role="teacher")


def test_update_name(user_service):
    user_id = user_service.create_account(name="Alice", username="alice", password="secret1")

    assert user_service.update_name(user_id, "  Alice Smith ") == "Alice Smith"
    assert user_service.get(user_id).name == "Alice Smith"
    with pytest.raises(ValidationError):
        user_service.update_name(user_id, "")


def test_list_users_sorted_by_name(user_service):
    for name, username in [("carol", "c"), ("Alice", "a"), ("bob", "b")]:
        user_service.create_account(name=name, username=username, password="secret1")

    assert [u.name for u in user_service.list_users()] == ["Alice", "bob", "carol"]
    assert sorted(user_service.teacher_names().values()) == ["Alice", "bob", "carol"]


def test_notification_targets_skip_author_and_missing_tokens(user_service):
    a = user_service.create_account(name="A", username="a", password="secret1")
    b = user_service.create_account(name="B", username="b", password="secret1")
    user_service.create_account(name="C", username="c", password="secret1")
    user_service.register_notification_token(a, "tok-a")
    user_service.register_notification_token(b, "tok-b")

    assert user_service.notification_targets(exclude_user_id=a) == ["tok-b"]
    assert user_service.notification_targets() == ["tok-a", "tok-b"]


def test_demo_users_are_seeded_once(user_service, auth):
    created = ensure_demo_users(user_service, password="demo-pass")

    assert len(created) == len(DEMO_USERS)
    assert ensure_demo_users(user_service, password="demo-pass") == []
    assert auth.authenticate("head", "demo-pass").role == Role.HEAD_TEACHER
