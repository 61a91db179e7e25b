# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from gymdash.auth.authority import SessionAuthority
from gymdash.auth.models import PublicUser
from gymdash.auth.session import unsign_token
from gymdash.config import Settings
from gymdash.core.errors import Forbidden, MissingToken, SessionExpiredOrUnknown

ROLE_ORDER = {"assistant": 0, "admin": 1}


def _rank(role: str) -> int:
    return ROLE_ORDER.get((role or "assistant").strip().lower(), 0)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_authority(request: Request) -> SessionAuthority:
    return request.app.state.authority


def session_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(get_settings(request).cookie_name) or None


async def require_user(request: Request) -> PublicUser:
    raw = session_cookie(request)
    if not raw:
        raise MissingToken()
    token = unsign_token(get_settings(request), raw)
    if token is None:
        raise SessionExpiredOrUnknown()
    return await get_authority(request).resolve_session(token)


def require_role(min_role: str):
    async def _dep(user: PublicUser = Depends(require_user)) -> PublicUser:
        if _rank(user.role) < _rank(min_role):
            raise Forbidden()
        return user

    return _dep
