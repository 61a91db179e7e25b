# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session cookie transport.

The cookie carries the opaque session token signed with the application
secret, so forged or truncated values are rejected before any lookup.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import Response
from itsdangerous import BadSignature, Signer

from gymdash.auth.models import SessionRecord
from gymdash.config import Settings

SIGNER_SALT = "gymdash.session.v1"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _signer(settings: Settings) -> Signer:
    return Signer(secret_key=settings.secret_key, salt=SIGNER_SALT)


def sign_token(settings: Settings, token: str) -> str:
    return _signer(settings).sign(token).decode("utf-8")


def unsign_token(settings: Settings, value: str) -> Optional[str]:
    """Return the raw token, or None when the signature does not match."""
    if not value:
        return None
    try:
        return _signer(settings).unsign(value).decode("utf-8")
    except BadSignature:
        return None


def cookie_settings(settings: Settings) -> dict:
    return {"httponly": True, "samesite": "strict", "secure": settings.production, "path": "/"}


def set_session_cookie(response: Response, settings: Settings, record: SessionRecord) -> None:
    response.set_cookie(
        settings.cookie_name,
        sign_token(settings, record.token),
        expires=record.expires_at,
        **cookie_settings(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(settings.cookie_name, "", expires=EPOCH, **cookie_settings(settings))
