# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session authority: credential checks and the session lifecycle.

Sessions are opaque random tokens stored with an absolute expiry. Expiry is
lazy: an expired row is treated as absent on read and is only removed by
logout or by an explicit ``purge_expired`` call.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Tuple

from gymdash.auth.models import Credential, PublicUser, SessionRecord
from gymdash.auth.passwords import hash_password, needs_rehash, verify_password
from gymdash.core.errors import InvalidCredentials, MissingToken, SessionExpiredOrUnknown
from gymdash.core.utils import utcnow

log = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)
TOKEN_BYTES = 32


class CredentialStore(Protocol):
    async def get_by_email(self, email: str) -> Optional[Credential]: ...

    async def get_by_id(self, user_id: int) -> Optional[Credential]: ...

    async def update_password_hash(self, user_id: int, password_hash: str) -> None: ...


class SessionStore(Protocol):
    async def get(self, token: str) -> Optional[SessionRecord]: ...

    async def insert(self, record: SessionRecord) -> None: ...

    async def delete(self, token: str) -> None: ...

    async def delete_expired(self, now: datetime) -> int: ...


class SessionAuthority:
    def __init__(
        self,
        credentials: CredentialStore,
        sessions: SessionStore,
        *,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.credentials = credentials
        self.sessions = sessions
        self.ttl = ttl
        self.clock = clock

    async def verify_credentials(self, email: str, password: str) -> Credential:
        if not email or not password:
            raise InvalidCredentials()
        cred = await self.credentials.get_by_email(email)
        if cred is None or not verify_password(cred.password_hash, password):
            raise InvalidCredentials()
        return cred

    async def login(self, email: str, password: str) -> Tuple[PublicUser, SessionRecord]:
        """Verify credentials and open a session; upgrades outdated hashes on the way."""
        try:
            cred = await self.verify_credentials(email, password)
        except InvalidCredentials:
            log.info("Login rejected")
            raise
        if needs_rehash(cred.password_hash):
            await self.credentials.update_password_hash(cred.id, hash_password(password))
            log.info("Upgraded password hash for user %s", cred.id)
        record = await self.issue_session(cred)
        log.info("Login ok for user %s", cred.id)
        return cred.public(), record

    async def issue_session(self, credential: Credential) -> SessionRecord:
        record = SessionRecord(
            token=secrets.token_hex(TOKEN_BYTES),
            user_id=credential.id,
            expires_at=self.clock() + self.ttl,
        )
        await self.sessions.insert(record)
        return record

    async def resolve_session(self, token: Optional[str]) -> PublicUser:
        if not token:
            raise MissingToken()
        record = await self.sessions.get(token)
        if record is None or record.expires_at <= self.clock():
            raise SessionExpiredOrUnknown()
        cred = await self.credentials.get_by_id(record.user_id)
        if cred is None:
            raise SessionExpiredOrUnknown()
        return cred.public()

    async def revoke_session(self, token: str) -> None:
        if not token:
            return
        await self.sessions.delete(token)

    async def change_password(self, credential_id: int, old_password: str, new_password: str) -> None:
        # Existing sessions stay valid after a password change.
        cred = await self.credentials.get_by_id(credential_id)
        if cred is None or not verify_password(cred.password_hash, old_password):
            raise InvalidCredentials()
        await self.credentials.update_password_hash(cred.id, hash_password(new_password))
        log.info("Password changed for user %s", cred.id)

    async def purge_expired(self) -> int:
        """Delete sessions already past their expiry. Maintenance only."""
        count = await self.sessions.delete_expired(self.clock())
        log.info("Purged %d expired session(s)", count)
        return count
