from __future__ import annotations

import logging
import os
from typing import Optional

from ..core.enums import Role
from .service import UserService

logger = logging.getLogger(__name__)

# (name, username, role)
DEMO_USERS = (
    ("Head Teacher", "head", Role.HEAD_TEACHER),
    ("Alice Nguyen", "alice", Role.TEACHER),
    ("Bob Tran", "bob", Role.TEACHER),
)


def ensure_demo_users(user_service: UserService, *, password: Optional[str] = None) -> list[str]:
    """Create the demo accounts that don't exist yet; returns the new user ids."""
    password = password or os.getenv("DEMO_PASSWORD", "123456")
    created = []
    for name, username, role in DEMO_USERS:
        if user_service.find_by_username(username):
            continue
        created.append(user_service.create_account(name=name, username=username, password=password, role=role))
    logger.info("Demo users ready (%s created)", len(created))
    return created
