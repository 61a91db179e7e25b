#!/usr/bin/env python3
"""Delete expired session rows. Safe to run from cron while the app is up."""
from __future__ import annotations

import asyncio
import logging

from gymdash.auth.authority import SessionAuthority
from gymdash.config import load_settings
from gymdash.infra.credential_repo import SqliteCredentialStore
from gymdash.infra.database import open_db
from gymdash.infra.session_repo import SqliteSessionStore


async def _purge(db_path: str) -> int:
    db = await open_db(db_path)
    try:
        authority = SessionAuthority(SqliteCredentialStore(db), SqliteSessionStore(db))
        return await authority.purge_expired()
    finally:
        await db.close()


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    count = asyncio.run(_purge(settings.db_path))
    print(f"Purged {count} expired session(s)")


if __name__ == "__main__":
    main()
