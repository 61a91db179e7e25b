#!/usr/bin/env python3
from __future__ import annotations

import asyncio
from getpass import getpass

from gymdash.auth import users as user_admin
from gymdash.config import load_settings
from gymdash.core.errors import EmailAlreadyRegistered
from gymdash.infra.credential_repo import SqliteCredentialStore
from gymdash.infra.database import open_db


async def _create(db_path: str, email: str, password: str) -> int:
    db = await open_db(db_path)
    try:
        return await user_admin.signup_admin(SqliteCredentialStore(db), email, password)
    finally:
        await db.close()


def main() -> None:
    settings = load_settings()

    email = input("Admin email: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        user_id = asyncio.run(_create(settings.db_path, email, pw1))
    except EmailAlreadyRegistered:
        raise SystemExit(f"Email already registered: {email}")
    except ValueError as e:
        raise SystemExit(str(e))
    print(f"OK -> admin {user_id} in {settings.db_path}")


if __name__ == "__main__":
    main()
