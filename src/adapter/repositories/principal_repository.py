import asyncio
from typing import Optional, Type

from sqlalchemy import case
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.principal_repository import IPrincipalRepository, Principal
from src.domain.entities import Applicant, Referrer


class SqlModelPrincipalRepository(IPrincipalRepository):
    """
    Principal repository implementation using SQLModel.

    Every statement is bounded by timeout_seconds. A timeout surfaces as the
    built-in TimeoutError; principal reads have no stateless fallback.
    """

    model: Type[Principal]

    def __init__(self, session: AsyncSession, timeout_seconds: float = 5):
        self.session = session
        self.timeout_seconds = timeout_seconds

    async def _execute(self, stmt):
        async with asyncio.timeout(self.timeout_seconds):
            return await self.session.execute(stmt)

    async def get_by_id(self, principal_id: str) -> Optional[Principal]:
        """Get principal by public ID, always re-reading archived/token_epoch"""
        stmt = (
            select(self.model)
            .where(self.model.id == principal_id)
            .execution_options(populate_existing=True)
        )
        result = await self._execute(stmt)
        return result.scalar_one_or_none()

    async def bump_token_epoch(self, principal_id: str) -> Optional[int]:
        """Increment token_epoch in place; unset epochs count as 1"""
        stmt = (
            update(self.model)
            .where(self.model.id == principal_id)
            .values(
                token_epoch=case(
                    (self.model.token_epoch < 1, 2), else_=self.model.token_epoch + 1
                )
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt)
        if result.rowcount == 0:
            return None

        principal = await self.get_by_id(principal_id)
        return principal.current_token_epoch if principal else None

    async def archive(self, principal_id: str) -> bool:
        """Mark principal archived"""
        stmt = (
            update(self.model)
            .where(self.model.id == principal_id)
            .values(archived=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt)
        return result.rowcount > 0


class ApplicantRepository(SqlModelPrincipalRepository):
    model = Applicant


class ReferrerRepository(SqlModelPrincipalRepository):
    model = Referrer
