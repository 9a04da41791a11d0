"""
Refresh Mobile Session Use Case

Rotates a refresh token into a new token pair.
"""

from src.app.services.mobile_session_manager import MobileSessionManager
from src.domain.errors import InvalidRequest

from .dtos import MobileSessionResponse


class RefreshMobileSessionUseCase:
    """
    Use case for refreshing a mobile session.

    Business Rules:
    - Refresh token is single-use; the previous one stops working on success
    - Archived principals get 403 and their session is revoked server-side
    - A token minted before the latest epoch bump is rejected (401)
    """

    def __init__(self, manager: MobileSessionManager):
        self.manager = manager
        self.uow = manager.uow

    async def execute(self, refresh_token: str) -> MobileSessionResponse:
        refresh_token = (refresh_token or "").strip()
        if not refresh_token:
            raise InvalidRequest("Missing refresh token.")

        async with self.uow:
            issued = await self.manager.refresh(refresh_token)

        return MobileSessionResponse.from_issued(issued)
