# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication and session handling.

This package provides:
- Password hashing/verification (argon2, with legacy SHA-256 support)
- The session authority (login, session resolution, logout, password change)
- Signed session cookies (itsdangerous)
- Admin/assistant account management
"""
