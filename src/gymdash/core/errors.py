# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error types shared by the auth layer, the repositories and the HTTP app."""

from __future__ import annotations


class AuthError(Exception):
    """Base class for failures that end a request as unauthenticated/unauthorized."""

    status_code = 401
    message = "Unauthorized"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidCredentials(AuthError):
    # Same message for unknown email and wrong password.
    message = "Invalid credentials"


class MissingToken(AuthError):
    pass


class SessionExpiredOrUnknown(AuthError):
    pass


class Forbidden(AuthError):
    status_code = 403
    message = "Forbidden"


class StorageFailure(Exception):
    """The database is unreachable or returned an unexpected error."""


class EmailAlreadyRegistered(Exception):
    pass


class NotFound(Exception):
    pass
