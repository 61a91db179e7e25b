# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import datetime
from typing import Optional

import aiosqlite

from gymdash.auth.models import SessionRecord
from gymdash.core.utils import from_epoch_ms, to_epoch_ms
from gymdash.infra.database import storage_errors


class SqliteSessionStore:
    """Session rows keyed by token. Expiry is stored as epoch milliseconds."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def get(self, token: str) -> Optional[SessionRecord]:
        with storage_errors("session lookup"):
            async with self.db.execute("SELECT * FROM sessions WHERE id = ?", (token,)) as cur:
                row = await cur.fetchone()
        if not row:
            return None
        return SessionRecord(
            token=str(row["id"]),
            user_id=int(row["userId"]),
            expires_at=from_epoch_ms(int(row["expiresAt"])),
        )

    async def insert(self, record: SessionRecord) -> None:
        with storage_errors("session insert"):
            await self.db.execute(
                "INSERT INTO sessions (id, userId, expiresAt) VALUES (?, ?, ?)",
                (record.token, record.user_id, to_epoch_ms(record.expires_at)),
            )
            await self.db.commit()

    async def delete(self, token: str) -> None:
        with storage_errors("session delete"):
            await self.db.execute("DELETE FROM sessions WHERE id = ?", (token,))
            await self.db.commit()

    async def delete_expired(self, now: datetime) -> int:
        with storage_errors("session purge"):
            cur = await self.db.execute("DELETE FROM sessions WHERE expiresAt <= ?", (to_epoch_ms(now),))
            await self.db.commit()
        return cur.rowcount
