"""
Use Case: Revoke Principal Sessions

Sign-out-everywhere: revokes every stateful mobile session of a principal.
Stateless refresh tokens are not affected; rotate the token epoch for that.
"""

import logging
from typing import Optional

from src.app.services.token_codec import Clock, utc_now
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.mobile_auth.dtos import CamelModel
from src.domain.entities import PrincipalType
from src.domain.errors import PrincipalNotFound

logger = logging.getLogger(__name__)


class RevokePrincipalSessionsResponse(CamelModel):
    """Response DTO for RevokePrincipalSessionsUseCase"""

    ok: bool = True
    principal_id: str
    revoked_count: int


class RevokePrincipalSessionsUseCase:
    """
    Revoke all active sessions of a principal.

    Idempotent: a second call succeeds and revokes 0 sessions.
    """

    def __init__(self, uow: UnitOfWork, clock: Optional[Clock] = None):
        self.uow = uow
        self.clock = clock or utc_now

    async def execute(
        self, principal_type: PrincipalType, principal_id: str
    ) -> RevokePrincipalSessionsResponse:
        principal_type = PrincipalType(principal_type)
        async with self.uow:
            principal = await self.uow.principals(principal_type).get_by_id(principal_id)
            if principal is None:
                raise PrincipalNotFound(f"{principal_type.value.capitalize()} not found.")

            revoked_count = await self.uow.sessions.revoke_all_for_principal(
                principal_type, principal_id, self.clock()
            )
            await self.uow.commit()

        logger.info(
            f"Sessions revoked: principal_type={principal_type.value} "
            f"principal_id={principal_id} count={revoked_count}"
        )
        return RevokePrincipalSessionsResponse(
            principal_id=principal_id, revoked_count=revoked_count
        )
