# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

import pandas as pd

from gymdash.core.errors import NotFound
from gymdash.infra.member_repo import MEMBER_FIELDS, MemberRepo


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: data.get(k) for k in MEMBER_FIELDS}
    name = str(out.get("name") or "").strip()
    if not name:
        raise ValueError("Member name is required")
    out["name"] = name
    return out


async def create_member(repo: MemberRepo, data: Dict[str, Any]) -> int:
    return await repo.insert(_clean(data))


async def get_member(repo: MemberRepo, member_id: int) -> Dict[str, Any]:
    member = await repo.get(member_id)
    if member is None:
        raise NotFound("Member not found")
    return member


async def update_member(repo: MemberRepo, member_id: int, data: Dict[str, Any]) -> None:
    await get_member(repo, member_id)
    await repo.update_profile(member_id, _clean(data))


async def list_members(repo: MemberRepo) -> List[Dict[str, Any]]:
    return await repo.list_all()


async def members_frame(repo: MemberRepo) -> pd.DataFrame:
    """All members as a dataframe with a stable column order (for exports)."""
    rows = await repo.list_all()
    return pd.DataFrame(rows, columns=["id", *MEMBER_FIELDS])


def subscription_status(end_date: Any, now: datetime) -> str:
    """'Expired' once now is past endDate. A missing or unreadable endDate never expires."""
    end = pd.to_datetime(end_date, errors="coerce", utc=True)
    if pd.isna(end):
        return "Active"
    return "Expired" if now > end.to_pydatetime() else "Active"


async def public_profile(repo: MemberRepo, member_id: int, now: datetime) -> Dict[str, Any]:
    """Shareable read-only view of a member: no contact or body details."""
    member = await get_member(repo, member_id)
    return {
        "id": member["id"],
        "name": member["name"],
        "subscriptionType": member.get("subscriptionType"),
        "endDate": member.get("endDate"),
        "status": subscription_status(member.get("endDate"), now),
    }
