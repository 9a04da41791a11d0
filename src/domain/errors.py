"""
Mobile Auth Domain Errors

Typed failures raised by the session core. Each AuthError carries a stable
machine-readable code and a message that is safe to show to the client.
HTTP status mapping happens in the API layer (src/api/error.py).
"""

from typing import Optional


class AuthError(Exception):
    """Base class for every client-facing authentication failure"""

    code = "AUTH_ERROR"
    default_message = "Authentication failed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(AuthError):
    code = "INVALID_REQUEST"
    default_message = "Invalid request."


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials."


class InvalidOrExpiredSession(AuthError):
    code = "INVALID_OR_EXPIRED_SESSION"
    default_message = "Invalid or expired session."


class TokenInvalid(AuthError):
    code = "TOKEN_INVALID"
    default_message = "Invalid token."


class TokenExpired(TokenInvalid):
    code = "TOKEN_EXPIRED"
    default_message = "Token expired."


class PrincipalArchived(AuthError):
    """Raised for archived principals; clients stop retrying on this code"""

    code = "PRINCIPAL_ARCHIVED"
    default_message = "This account has been archived and portal access is no longer available."


class PrincipalNotFound(AuthError):
    code = "PRINCIPAL_NOT_FOUND"
    default_message = "Account not found."


class RateLimited(AuthError):
    code = "RATE_LIMITED"
    default_message = "Too many requests. Please try again shortly."

    def __init__(self, retry_after: int = 0, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message)


class SessionRefreshUnavailable(AuthError):
    """A stateful refresh token could not be checked because the store is down"""

    code = "SESSION_TEMPORARILY_UNAVAILABLE"
    default_message = "Mobile sign-in is temporarily unavailable. Please try again in a few minutes."

    def __init__(self, retry_after: int = 30, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message)


class StoreUnavailable(Exception):
    """
    The session store is unreachable, timed out, or is missing its schema.

    Not an AuthError: it never reaches a client directly. The
    session manager turns it into a stateless fallback (issue) or into
    SessionRefreshUnavailable (stateful refresh).
    """

    def __init__(self, reason: str = "session store unavailable"):
        self.reason = reason
        super().__init__(reason)
