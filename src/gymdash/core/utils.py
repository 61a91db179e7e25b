# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import io
from datetime import datetime, timezone

import pandas as pd
from fastapi.responses import StreamingResponse


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def from_epoch_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def subscription_key(kind: str) -> str:
    """'Monthly Fitness' -> 'monthlyFitness' (pricing settings key)."""
    if not kind or not isinstance(kind, str):
        return ""
    parts = kind.split()
    if not parts:
        return ""
    head, rest = parts[0].lower(), parts[1:]
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def df_to_csv_stream(df: pd.DataFrame, filename: str = "") -> StreamingResponse:
    """Stream a dataframe as CSV without writing to disk."""
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    buf.seek(0)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'} if filename else None
    return StreamingResponse(iter([buf.getvalue()]), media_type="text/csv", headers=headers)
