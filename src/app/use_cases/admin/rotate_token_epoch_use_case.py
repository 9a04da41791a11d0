"""
Use Case: Rotate Token Epoch

Bumps a principal's token epoch. Every token issued under the previous epoch
stops working on its next use: stateful sessions, stateless refresh tokens,
access tokens and referrer portal links.
"""

import logging

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.mobile_auth.dtos import CamelModel
from src.domain.entities import PrincipalType
from src.domain.errors import PrincipalNotFound

logger = logging.getLogger(__name__)


class RotateTokenEpochResponse(CamelModel):
    """Response DTO for RotateTokenEpochUseCase"""

    ok: bool = True
    principal_id: str
    token_epoch: int


class RotateTokenEpochUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, principal_type: PrincipalType, principal_id: str
    ) -> RotateTokenEpochResponse:
        async with self.uow:
            token_epoch = await self.uow.principals(principal_type).bump_token_epoch(principal_id)
            if token_epoch is None:
                raise PrincipalNotFound(f"{PrincipalType(principal_type).value.capitalize()} not found.")
            await self.uow.commit()

        logger.info(
            f"Token epoch rotated: principal_type={PrincipalType(principal_type).value} "
            f"principal_id={principal_id} token_epoch={token_epoch}"
        )
        return RotateTokenEpochResponse(principal_id=principal_id, token_epoch=token_epoch)
