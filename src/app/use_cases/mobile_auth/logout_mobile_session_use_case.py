"""
Logout Mobile Session Use Case

Revokes the session behind a refresh token. Logout always succeeds from the
client's point of view; unknown, stateless or blank tokens are a no-op.
"""

import logging

from src.app.services.mobile_session_manager import MobileSessionManager

from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutMobileSessionUseCase:
    def __init__(self, manager: MobileSessionManager):
        self.manager = manager
        self.uow = manager.uow

    async def execute(self, refresh_token: str) -> LogoutResponse:
        refresh_token = (refresh_token or "").strip()
        if not refresh_token:
            return LogoutResponse()

        async with self.uow:
            revoked = await self.manager.revoke(refresh_token)

        if revoked:
            logger.info(f"{self.manager.label} mobile session revoked on logout")
        return LogoutResponse()
