# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import List, Optional

import aiosqlite

from gymdash.auth.models import Credential, PublicUser
from gymdash.core.errors import EmailAlreadyRegistered
from gymdash.infra.database import storage_errors


def _row_to_credential(row: aiosqlite.Row) -> Credential:
    return Credential(
        id=int(row["id"]),
        email=str(row["email"]),
        password_hash=str(row["password"]),
        role=str(row["role"] or "admin"),
        admin_id=row["admin_id"],
    )


class SqliteCredentialStore:
    """Point operations on the users table. Each call is one statement."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[Credential]:
        with storage_errors("credential lookup"):
            async with self.db.execute("SELECT * FROM users WHERE email = ?", (email,)) as cur:
                row = await cur.fetchone()
        return _row_to_credential(row) if row else None

    async def get_by_id(self, user_id: int) -> Optional[Credential]:
        with storage_errors("credential lookup"):
            async with self.db.execute("SELECT * FROM users WHERE id = ?", (user_id,)) as cur:
                row = await cur.fetchone()
        return _row_to_credential(row) if row else None

    async def insert(self, email: str, password_hash: str, role: str, admin_id: Optional[int] = None) -> int:
        with storage_errors("credential insert"):
            try:
                cur = await self.db.execute(
                    "INSERT INTO users (email, password, role, admin_id) VALUES (?, ?, ?, ?)",
                    (email, password_hash, role, admin_id),
                )
            except aiosqlite.IntegrityError as e:
                await self.db.rollback()
                raise EmailAlreadyRegistered(email) from e
            await self.db.commit()
        return int(cur.lastrowid)

    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        with storage_errors("password update"):
            await self.db.execute("UPDATE users SET password = ? WHERE id = ?", (password_hash, user_id))
            await self.db.commit()

    async def list_assistants(self, admin_id: int) -> List[PublicUser]:
        with storage_errors("assistant listing"):
            async with self.db.execute(
                "SELECT * FROM users WHERE admin_id = ? AND role = 'assistant' ORDER BY id",
                (admin_id,),
            ) as cur:
                rows = await cur.fetchall()
        return [_row_to_credential(r).public() for r in rows]

    async def delete_assistant(self, admin_id: int, user_id: int) -> bool:
        with storage_errors("assistant delete"):
            cur = await self.db.execute(
                "DELETE FROM users WHERE id = ? AND role = 'assistant' AND admin_id = ?",
                (user_id, admin_id),
            )
            await self.db.commit()
        return cur.rowcount > 0
