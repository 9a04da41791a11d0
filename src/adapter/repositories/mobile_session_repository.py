from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.session_store_guard import session_store_guard
from src.app.repositories.mobile_session_repository import IMobileSessionRepository
from src.domain.entities import MobileSession, PrincipalType

ROTATABLE_FIELDS = frozenset({"refresh_token_hash", "refresh_token_expires_at", "last_used_at"})


class MobileSessionRepository(IMobileSessionRepository):
    """Mobile session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession, timeout_seconds: float = 5):
        self.session = session
        self.timeout_seconds = timeout_seconds

    async def create(self, session_obj: MobileSession) -> MobileSession:
        """Create a new session"""
        async with session_store_guard(self.timeout_seconds):
            self.session.add(session_obj)
            await self.session.flush()
            await self.session.refresh(session_obj)
        return session_obj

    async def get_by_id(self, session_id: str) -> Optional[MobileSession]:
        """Get session by ID"""
        async with session_store_guard(self.timeout_seconds):
            stmt = (
                select(MobileSession)
                .where(MobileSession.id == session_id)
                .execution_options(populate_existing=True)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

    async def conditional_update(
        self,
        session_id: str,
        expected_hash: str,
        values: Dict[str, Any],
        now: datetime,
    ) -> int:
        """
        Rotate a session in a single UPDATE ... WHERE statement.

        The WHERE clause is the optimistic-concurrency guard: of several
        concurrent rotations presenting the same hash, the store applies at
        most one and the rest see zero rows affected.
        """
        unknown = set(values) - ROTATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be rotated: {sorted(unknown)}")

        stmt = (
            update(MobileSession)
            .where(
                MobileSession.id == session_id,
                MobileSession.refresh_token_hash == expected_hash,
                MobileSession.revoked_at.is_(None),
                MobileSession.session_expires_at > now,
                MobileSession.refresh_token_expires_at > now,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with session_store_guard(self.timeout_seconds):
            result = await self.session.execute(stmt)
            await self.session.flush()
        return result.rowcount

    async def revoke_by_id(self, session_id: str, now: datetime) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(MobileSession)
            .where(MobileSession.id == session_id, MobileSession.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        async with session_store_guard(self.timeout_seconds):
            result = await self.session.execute(stmt)
            await self.session.flush()
        return result.rowcount > 0

    async def revoke_by_refresh_token_hash(
        self, session_id: str, refresh_token_hash: str, now: datetime
    ) -> bool:
        """Revoke a session whose current refresh secret matches"""
        stmt = (
            update(MobileSession)
            .where(
                MobileSession.id == session_id,
                MobileSession.refresh_token_hash == refresh_token_hash,
                MobileSession.revoked_at.is_(None),
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        async with session_store_guard(self.timeout_seconds):
            result = await self.session.execute(stmt)
            await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_for_principal(
        self, principal_type: PrincipalType, principal_id: str, now: datetime
    ) -> int:
        """Revoke all active sessions for a principal"""
        stmt = (
            update(MobileSession)
            .where(
                MobileSession.principal_type == principal_type,
                MobileSession.principal_id == principal_id,
                MobileSession.revoked_at.is_(None),
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        async with session_store_guard(self.timeout_seconds):
            result = await self.session.execute(stmt)
            await self.session.flush()
        return result.rowcount
