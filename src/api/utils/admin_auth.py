"""
Admin API Key Authentication

Validates admin API keys for principal administration endpoints.
"""

from fastapi import Header, status
from src.api.error import ClientError
from src.app.services.secret_hasher import constant_time_equals
from src.domain.errors import InvalidCredentials
from config import ApplicationConfig


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Service-to-service auth for support tooling; unrelated to mobile tokens.
    The key is compared in constant time.

    Raises:
        ClientError: 401 if key is missing or invalid
    """
    if not x_admin_api_key:
        raise ClientError(
            InvalidCredentials("Admin API key required."),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    valid_admin_key = ApplicationConfig.ADMIN_API_KEY or ""
    if not constant_time_equals(x_admin_api_key, valid_admin_key):
        raise ClientError(
            InvalidCredentials("Invalid admin API key."),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
