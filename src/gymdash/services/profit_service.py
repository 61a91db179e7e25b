# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Revenue statistics derived from member subscriptions and pricing settings."""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from gymdash.core.utils import subscription_key
from gymdash.infra.member_repo import MemberRepo, SettingsRepo

COMBINED_SEPARATOR = " & "


def member_price(subscription_type: str, pricing: Mapping[str, float]) -> float:
    """Price of one member: a combined subscription sums its parts; unknown parts cost 0."""
    if not subscription_type:
        return 0.0
    total = 0.0
    for part in str(subscription_type).split(COMBINED_SEPARATOR):
        total += float(pricing.get(subscription_key(part.strip()), 0) or 0)
    return total


def compute_profits(pricing: Mapping[str, float], members: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    df = pd.DataFrame(list(members), columns=["subscriptionType", "startDate"])
    total_members = int(len(df))
    if df.empty:
        return {
            "totalRevenue": 0.0,
            "totalMembers": 0,
            "averageRevenuePerMember": 0.0,
            "monthlyRevenue": [],
        }

    df["price"] = df["subscriptionType"].map(lambda s: member_price(s, pricing))
    # Members without a usable start date count toward totals only.
    df["month"] = pd.to_datetime(df["startDate"], errors="coerce", utc=True, format="mixed").dt.strftime("%Y-%m")

    total_revenue = float(df["price"].sum())
    monthly = df.dropna(subset=["month"]).groupby("month", sort=True)["price"].sum()
    monthly_revenue: List[Dict[str, Any]] = [
        {"name": str(month), "total": float(total)} for month, total in monthly.items()
    ]

    return {
        "totalRevenue": total_revenue,
        "totalMembers": total_members,
        "averageRevenuePerMember": total_revenue / total_members,
        "monthlyRevenue": monthly_revenue,
    }


async def profit_stats(members: MemberRepo, settings: SettingsRepo) -> Dict[str, Any]:
    pricing = await settings.get_pricing()
    rows = await members.subscriptions()
    return compute_profits(pricing, rows)


def validate_pricing(data: Any) -> Dict[str, float]:
    if not isinstance(data, dict):
        raise ValueError("Pricing must be a JSON object")
    out: Dict[str, float] = {}
    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValueError(f"Price for '{key}' must be a number")
        out[str(key)] = value
    return out
