# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SQLite connection and schema management (aiosqlite)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

import aiosqlite

from gymdash.core.errors import StorageFailure

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS members (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    phone TEXT,
    subscriptionType TEXT,
    startDate TEXT,
    endDate TEXT,
    gender TEXT,
    age INTEGER,
    weight INTEGER,
    height INTEGER,
    dailyCalories INTEGER,
    mealPlan TEXT
);

CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT
);

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'admin',
    admin_id INTEGER REFERENCES users (id)
);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    userId INTEGER NOT NULL,
    expiresAt INTEGER NOT NULL,
    FOREIGN KEY (userId) REFERENCES users (id)
);
"""

# Columns added after the first release; older database files lack them.
LATE_COLUMNS: Dict[str, Dict[str, str]] = {
    "members": {"mealPlan": "TEXT"},
    "users": {"role": "TEXT NOT NULL DEFAULT 'admin'", "admin_id": "INTEGER"},
}


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise driver errors as StorageFailure, keeping the cause chained."""
    try:
        yield
    except aiosqlite.Error as e:
        raise StorageFailure(f"{action} failed: {type(e).__name__}") from e


async def _add_missing_columns(db: aiosqlite.Connection) -> None:
    for table, columns in LATE_COLUMNS.items():
        async with db.execute(f"PRAGMA table_info({table})") as cur:
            existing = {row["name"] for row in await cur.fetchall()}
        for col, decl in columns.items():
            if col not in existing:
                log.info("Adding missing column %s.%s", table, col)
                await db.execute(f"ALTER TABLE {table} ADD COLUMN {col} {decl}")


async def open_db(path: str) -> aiosqlite.Connection:
    """Open the database file, creating parent dirs and the schema if needed."""
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    with storage_errors("open database"):
        db = await aiosqlite.connect(path)
        db.row_factory = aiosqlite.Row
        await db.executescript(SCHEMA)
        await _add_missing_columns(db)
        await db.commit()
    log.debug("Database ready at %s", path)
    return db
