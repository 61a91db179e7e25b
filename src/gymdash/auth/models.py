# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

ROLES = ("admin", "assistant")


@dataclass(frozen=True)
class PublicUser:
    """A credential as seen outside the auth layer (no password hash)."""

    id: int
    email: str
    role: str
    admin_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "role": self.role, "admin_id": self.admin_id}


@dataclass(frozen=True)
class Credential:
    id: int
    email: str
    password_hash: str
    role: str = "admin"
    admin_id: Optional[int] = None

    def public(self) -> PublicUser:
        return PublicUser(id=self.id, email=self.email, role=self.role, admin_id=self.admin_id)

    def __repr__(self) -> str:
        return f"Credential(id={self.id}, email={self.email!r}, role={self.role!r})"


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user_id: int
    expires_at: datetime

    def __repr__(self) -> str:
        return f"SessionRecord(user_id={self.user_id}, expires_at={self.expires_at.isoformat()})"
