"""
Load Mobile Context Use Case

Resolves the principal behind a mobile access token.
"""

from src.app.services.mobile_session_manager import MobileSessionManager
from src.domain.errors import InvalidOrExpiredSession

from .dtos import MobileContextResponse


class LoadMobileContextUseCase:
    """
    Use case for the `me` endpoint.

    Business Rules:
    - Access token must be signed, unexpired and issued for this principal type
    - Principal must still exist, be active, and be on the same token epoch
    """

    def __init__(self, manager: MobileSessionManager):
        self.manager = manager
        self.uow = manager.uow

    async def execute(self, access_token: str) -> MobileContextResponse:
        access_token = (access_token or "").strip()
        if not access_token:
            raise InvalidOrExpiredSession("Missing access token.")

        async with self.uow:
            principal = await self.manager.authenticate_access_token(access_token)
            return MobileContextResponse(principal_summary=principal.summary())
