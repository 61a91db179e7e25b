# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Admin and assistant accounts (owner of the users table)."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from gymdash.auth.models import PublicUser
from gymdash.auth.passwords import hash_password
from gymdash.core.errors import Forbidden

log = logging.getLogger(__name__)


class UserStore(Protocol):
    async def insert(self, email: str, password_hash: str, role: str, admin_id: Optional[int] = None) -> int: ...

    async def list_assistants(self, admin_id: int) -> List[PublicUser]: ...

    async def delete_assistant(self, admin_id: int, user_id: int) -> bool: ...


def _clean_email(email: str) -> str:
    e = (email or "").strip()
    if not e or "@" not in e:
        raise ValueError("A valid email is required")
    return e


def _require_admin(user: PublicUser) -> None:
    if not user.is_admin:
        raise Forbidden()


async def signup_admin(store: UserStore, email: str, password: str) -> int:
    user_id = await store.insert(_clean_email(email), hash_password(password), "admin")
    log.info("Registered admin %s", user_id)
    return user_id


async def create_assistant(store: UserStore, admin: PublicUser, email: str, password: str) -> int:
    _require_admin(admin)
    user_id = await store.insert(_clean_email(email), hash_password(password), "assistant", admin.id)
    log.info("Admin %s provisioned assistant %s", admin.id, user_id)
    return user_id


async def list_assistants(store: UserStore, admin: PublicUser) -> List[PublicUser]:
    _require_admin(admin)
    return await store.list_assistants(admin.id)


async def delete_assistant(store: UserStore, admin: PublicUser, user_id: int) -> None:
    """Remove one of the admin's assistants. Admin rows never match."""
    _require_admin(admin)
    if await store.delete_assistant(admin.id, user_id):
        log.info("Admin %s removed assistant %s", admin.id, user_id)
