from typing import Dict, Optional

from fastapi import status

from src.domain.errors import (
    AuthError,
    InvalidCredentials,
    InvalidOrExpiredSession,
    InvalidRequest,
    PrincipalArchived,
    PrincipalNotFound,
    RateLimited,
    SessionRefreshUnavailable,
    TokenInvalid,
)

# Most specific first; TokenExpired is covered by TokenInvalid
STATUS_BY_ERROR = (
    (RateLimited, status.HTTP_429_TOO_MANY_REQUESTS),
    (SessionRefreshUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (PrincipalArchived, status.HTTP_403_FORBIDDEN),
    (PrincipalNotFound, status.HTTP_404_NOT_FOUND),
    (InvalidRequest, status.HTTP_400_BAD_REQUEST),
    (InvalidCredentials, status.HTTP_401_UNAUTHORIZED),
    (InvalidOrExpiredSession, status.HTTP_401_UNAUTHORIZED),
    (TokenInvalid, status.HTTP_401_UNAUTHORIZED),
)


class ClientError(Exception):
    def __init__(
        self,
        base_error: AuthError,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.headers = headers
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


def to_client_error(error: AuthError) -> ClientError:
    """Map a domain AuthError onto its HTTP status (and Retry-After, if any)"""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_type, mapped_status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            status_code = mapped_status
            break

    headers = None
    retry_after = getattr(error, "retry_after", None)
    if retry_after:
        headers = {"Retry-After": str(retry_after)}

    return ClientError(error, status_code=status_code, headers=headers)
