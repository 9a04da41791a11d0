"""
Use Case: Archive Principal

Archives a principal and revokes all of its stateful sessions in one
transaction. Archived principals cannot exchange, refresh or use access
tokens; refresh answers PRINCIPAL_ARCHIVED so clients stop retrying.
"""

import logging
from typing import Optional

from src.app.services.token_codec import Clock, utc_now
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.mobile_auth.dtos import CamelModel
from src.domain.entities import PrincipalType
from src.domain.errors import PrincipalNotFound

logger = logging.getLogger(__name__)


class ArchivePrincipalResponse(CamelModel):
    """Response DTO for ArchivePrincipalUseCase"""

    ok: bool = True
    principal_id: str
    revoked_count: int


class ArchivePrincipalUseCase:
    """
    Archive a principal.

    Business Logic:
    1. Mark the principal archived (404 if unknown)
    2. Revoke all of its active sessions
    3. Commit both together

    Idempotent: archiving an archived principal succeeds and revokes 0 sessions
    """

    def __init__(self, uow: UnitOfWork, clock: Optional[Clock] = None):
        self.uow = uow
        self.clock = clock or utc_now

    async def execute(
        self, principal_type: PrincipalType, principal_id: str
    ) -> ArchivePrincipalResponse:
        principal_type = PrincipalType(principal_type)
        async with self.uow:
            archived = await self.uow.principals(principal_type).archive(principal_id)
            if not archived:
                raise PrincipalNotFound(f"{principal_type.value.capitalize()} not found.")

            revoked_count = await self.uow.sessions.revoke_all_for_principal(
                principal_type, principal_id, self.clock()
            )
            await self.uow.commit()

        logger.info(
            f"Principal archived: principal_type={principal_type.value} "
            f"principal_id={principal_id} sessions_revoked={revoked_count}"
        )
        return ArchivePrincipalResponse(principal_id=principal_id, revoked_count=revoked_count)
