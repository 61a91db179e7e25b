# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hashlib
import hmac
import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_PH = PasswordHasher()

# Unsalted SHA-256 hex digests written by databases created before argon2.
_LEGACY_SHA256 = re.compile(r"^[0-9a-f]{64}$")


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    return _PH.hash(plain)


def is_legacy_hash(hash_value: str) -> bool:
    return bool(_LEGACY_SHA256.match(hash_value or ""))


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    if is_legacy_hash(hash_value):
        digest = hashlib.sha256(plain.encode("utf-8")).hexdigest()
        return hmac.compare_digest(digest, hash_value)
    try:
        return _PH.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hash_value: str) -> bool:
    if is_legacy_hash(hash_value):
        return True
    try:
        return _PH.check_needs_rehash(hash_value)
    except InvalidHashError:
        return False
