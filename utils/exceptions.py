"""
Auth error taxonomy.

Every AuthError carries an HTTP status and a public message that is safe to
return to clients. The `reason` passed at raise time is for server logs only;
Revoked, InvalidToken and NotFound all look the same from the outside.
"""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised at startup when token settings are unusable."""


class CredentialStoreError(RuntimeError):
    """The refresh credential store could not be read or written."""


class AuthError(Exception):
    status = 401
    code = "UNAUTHORIZED"
    public_message = "Unauthorized"

    def __init__(self, reason: str | None = None):
        self.reason = reason or self.__class__.__name__
        super().__init__(self.reason)


class Unauthenticated(AuthError):
    """Missing, malformed or expired token."""


class InvalidToken(Unauthenticated):
    """The token codec rejected a token (signature, format, type or expiry)."""


class Revoked(Unauthenticated):
    """A well-formed, unexpired refresh token that is no longer the credential of record."""


class NotFound(Unauthenticated):
    """The user behind a valid token no longer exists."""


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"
    public_message = "Invalid credentials"


class Conflict(AuthError):
    status = 409
    code = "CONFLICT"
    public_message = "Email or username already in use"
