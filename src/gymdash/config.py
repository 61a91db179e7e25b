# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Anchor relative paths to the project root, not the current working directory.
BASE_DIR = Path(__file__).resolve().parents[2]

_TRUTHY = {"1", "true", "yes", "y"}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    db_path: str
    secret_key: str
    env: str = "development"
    cookie_name: str = "session_token"
    session_hours: int = 24
    allow_signup: bool = True
    log_level: str = "INFO"

    @property
    def production(self) -> bool:
        return self.env.strip().lower() == "production"


def _default_db_path() -> str:
    raw = os.getenv("GYM_DB_PATH", str(BASE_DIR / "data" / "database.db"))
    if raw == ":memory:":
        return raw
    return str(Path(raw).resolve())


def load_settings() -> Settings:
    secret = os.getenv("GYM_SECRET_KEY") or os.getenv("SECRET_KEY")
    if not secret:
        raise RuntimeError("Missing GYM_SECRET_KEY (or SECRET_KEY) in environment")
    return Settings(
        db_path=_default_db_path(),
        secret_key=secret,
        env=os.getenv("GYM_ENV", "development"),
        cookie_name=os.getenv("GYM_COOKIE_NAME", "session_token"),
        session_hours=int(os.getenv("GYM_SESSION_HOURS", "24")),
        allow_signup=_flag("GYM_ALLOW_SIGNUP", "true"),
        log_level=os.getenv("GYM_LOG_LEVEL", "INFO").upper(),
    )
