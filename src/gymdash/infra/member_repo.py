# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import aiosqlite

from gymdash.infra.database import storage_errors

MEMBER_FIELDS = [
    "name",
    "phone",
    "subscriptionType",
    "startDate",
    "endDate",
    "gender",
    "age",
    "weight",
    "height",
    "dailyCalories",
    "mealPlan",
]

# Subscription and dates are set at registration; later edits touch the profile only.
PROFILE_FIELDS = [
    "name",
    "phone",
    "gender",
    "age",
    "weight",
    "height",
    "dailyCalories",
    "mealPlan",
]

PRICING_KEY = "pricing"


class MemberRepo:
    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def list_all(self) -> List[Dict[str, Any]]:
        with storage_errors("member listing"):
            async with self.db.execute("SELECT * FROM members ORDER BY startDate DESC") as cur:
                rows = await cur.fetchall()
        return [dict(r) for r in rows]

    async def get(self, member_id: int) -> Optional[Dict[str, Any]]:
        with storage_errors("member lookup"):
            async with self.db.execute("SELECT * FROM members WHERE id = ?", (member_id,)) as cur:
                row = await cur.fetchone()
        return dict(row) if row else None

    async def insert(self, data: Dict[str, Any]) -> int:
        cols = ", ".join(MEMBER_FIELDS)
        marks = ", ".join("?" for _ in MEMBER_FIELDS)
        with storage_errors("member insert"):
            cur = await self.db.execute(
                f"INSERT INTO members ({cols}) VALUES ({marks})",
                tuple(data.get(c) for c in MEMBER_FIELDS),
            )
            await self.db.commit()
        return int(cur.lastrowid)

    async def update_profile(self, member_id: int, data: Dict[str, Any]) -> None:
        assignments = ", ".join(f"{c} = ?" for c in PROFILE_FIELDS)
        with storage_errors("member update"):
            await self.db.execute(
                f"UPDATE members SET {assignments} WHERE id = ?",
                tuple(data.get(c) for c in PROFILE_FIELDS) + (member_id,),
            )
            await self.db.commit()

    async def delete(self, member_id: int) -> None:
        with storage_errors("member delete"):
            await self.db.execute("DELETE FROM members WHERE id = ?", (member_id,))
            await self.db.commit()

    async def subscriptions(self) -> List[Dict[str, Any]]:
        """subscriptionType/startDate pairs for revenue aggregation."""
        with storage_errors("member listing"):
            async with self.db.execute("SELECT subscriptionType, startDate FROM members") as cur:
                rows = await cur.fetchall()
        return [dict(r) for r in rows]


class SettingsRepo:
    """Key/value settings; values are JSON documents."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def get_pricing(self) -> Dict[str, float]:
        with storage_errors("settings lookup"):
            async with self.db.execute("SELECT value FROM settings WHERE key = ?", (PRICING_KEY,)) as cur:
                row = await cur.fetchone()
        if not row or not row["value"]:
            return {}
        return json.loads(row["value"])

    async def save_pricing(self, pricing: Dict[str, float]) -> None:
        with storage_errors("settings update"):
            await self.db.execute(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                (PRICING_KEY, json.dumps(pricing)),
            )
            await self.db.commit()
