"""
Exchange Applicant Credential Use Case

Trades an applicant id + applicant key for a mobile session.
"""

import logging

from src.app.services.mobile_session_manager import MobileSessionManager
from src.app.services.secret_hasher import constant_time_equals, hash_secret, is_utf8_encodable
from src.domain.errors import InvalidCredentials, InvalidRequest, PrincipalNotFound

from .dtos import ApplicantExchangeCommand, MobileExchangeResponse

logger = logging.getLogger(__name__)


class ExchangeApplicantCredentialUseCase:
    """
    Use case for applicant mobile sign-in.

    Business Rules:
    - Both applicant id and applicant key are required
    - Applicant must exist (404)
    - Key hash is compared in constant time (401)
    - Archived applicants cannot sign in (403)
    - A session store outage still signs the applicant in (stateless fallback)
    """

    def __init__(self, manager: MobileSessionManager):
        self.manager = manager
        self.uow = manager.uow

    async def execute(self, command: ApplicantExchangeCommand) -> MobileExchangeResponse:
        applicant_id = (command.applicant_id or "").strip()
        applicant_key = (command.applicant_key or "").strip()
        if not applicant_id or not applicant_key:
            raise InvalidRequest("Missing applicant credentials.")

        if not is_utf8_encodable(applicant_id):
            raise PrincipalNotFound("Applicant not found.")

        async with self.uow:
            applicant = await self.manager.get_principal(applicant_id)

            stored_hash = (applicant.applicant_secret_hash or "").strip().lower()
            if not is_utf8_encodable(applicant_key) or not constant_time_equals(
                stored_hash, hash_secret(applicant_key)
            ):
                raise InvalidCredentials("Invalid applicant credentials.")

            # Read before issue: a store fallback expires loaded entities
            canonical_id = applicant.id
            summary = applicant.summary()
            issued = await self.manager.issue(applicant, user_agent=command.user_agent)

        logger.info(
            f"Applicant mobile session issued: applicant_id={canonical_id} "
            f"stateless={issued.stateless}"
        )
        return MobileExchangeResponse.from_issued(issued, principal_summary=summary)
