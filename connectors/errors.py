"""
Error taxonomy for credential linkage.

Every error carries the HTTP status it maps to and the message that is safe
to show to the caller.  The API layer turns them into JSON responses.
"""

from __future__ import annotations


class CredentialError(Exception):
    """Base class for all credential-linkage failures."""

    status_code: int = 500
    public_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        if message and self.status_code < 500:
            self.public_message = message


class ValidationError(CredentialError):
    """Missing or malformed user input (e.g. an empty API key)."""

    status_code = 400
    public_message = "Invalid request."


class AuthenticationError(CredentialError):
    """Missing or invalid session identity."""

    status_code = 401
    public_message = "Unauthorized"


class InvalidStateError(AuthenticationError):
    """OAuth state token failed verification.

    The public message never says which check failed.
    """

    public_message = "Invalid or expired OAuth state."

    def __init__(self, message: str | None = None):
        super().__init__(None)
        self.reason = message or "invalid state"
        self.args = (self.reason,)


class NotFoundError(CredentialError):
    """No credential on record — an expected steady-state signal."""

    status_code = 404
    public_message = "Not found."


class PersistenceError(CredentialError):
    """Storage read/write failure."""


class UpstreamExchangeError(CredentialError):
    """Third-party token exchange failed."""
