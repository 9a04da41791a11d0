"""
Exchange Referrer Portal Token Use Case

Trades a signed referrer portal link token for a mobile session.
"""

import logging

from src.app.services.mobile_session_manager import MobileSessionManager
from src.app.services.token_codec import TokenCodec
from src.domain.entities import PrincipalType, TokenUse
from src.domain.errors import (
    InvalidCredentials,
    InvalidOrExpiredSession,
    InvalidRequest,
    TokenInvalid,
)

from .dtos import MobileExchangeResponse, ReferrerExchangeCommand

logger = logging.getLogger(__name__)

STALE_PORTAL_LINK_MESSAGE = "Session expired. Please request a fresh sign-in link."


class ExchangeReferrerPortalTokenUseCase:
    """
    Use case for referrer mobile sign-in.

    Business Rules:
    - Portal token must verify against the portal key (401)
    - Referrer must exist (404)
    - Archived referrers cannot sign in (403)
    - The token's version must equal the referrer's current token epoch (401)
    """

    def __init__(self, manager: MobileSessionManager, portal_codec: TokenCodec):
        self.manager = manager
        self.portal_codec = portal_codec
        self.uow = manager.uow

    async def execute(self, command: ReferrerExchangeCommand) -> MobileExchangeResponse:
        portal_token = (command.portal_token or "").strip()
        if not portal_token:
            raise InvalidRequest("Missing login credentials.")

        try:
            claims = self.portal_codec.verify(
                portal_token,
                principal_type=PrincipalType.referrer,
                token_use=TokenUse.portal,
            )
        except TokenInvalid:
            raise InvalidCredentials("Invalid or expired token.")

        async with self.uow:
            referrer = await self.manager.get_principal(claims.principal_id)

            try:
                self.manager.ensure_usable(referrer, presented_epoch=claims.token_epoch)
            except InvalidOrExpiredSession:
                raise InvalidOrExpiredSession(STALE_PORTAL_LINK_MESSAGE)

            canonical_id = referrer.id
            summary = referrer.summary()
            issued = await self.manager.issue(referrer, user_agent=command.user_agent)

        logger.info(
            f"Referrer mobile session issued: referrer_id={canonical_id} "
            f"stateless={issued.stateless}"
        )
        return MobileExchangeResponse.from_issued(issued, principal_summary=summary)
