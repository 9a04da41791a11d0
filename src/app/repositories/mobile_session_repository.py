from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from src.domain.entities import MobileSession, PrincipalType


class IMobileSessionRepository(ABC):
    """
    Mobile session store interface - application layer.

    Every method may raise StoreUnavailable when the store is unreachable,
    times out, or is missing its schema. "Not found" is reported as None or
    a zero count, never as an error.
    """

    @abstractmethod
    async def create(self, session: MobileSession) -> MobileSession:
        """Persist a new session"""
        pass

    @abstractmethod
    async def get_by_id(self, session_id: str) -> Optional[MobileSession]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def conditional_update(
        self,
        session_id: str,
        expected_hash: str,
        values: Dict[str, Any],
        now: datetime,
    ) -> int:
        """
        Atomically apply values when the stored hash still equals expected_hash,
        the session is not revoked and both expiry ceilings are after now.
        Returns the number of rows updated (0 or 1).
        """
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: str, now: datetime) -> bool:
        """Revoke a session. Returns True if an active session was revoked."""
        pass

    @abstractmethod
    async def revoke_by_refresh_token_hash(
        self, session_id: str, refresh_token_hash: str, now: datetime
    ) -> bool:
        """Revoke a session only if the presented secret is its current one"""
        pass

    @abstractmethod
    async def revoke_all_for_principal(
        self, principal_type: PrincipalType, principal_id: str, now: datetime
    ) -> int:
        """Revoke all active sessions for a principal. Returns count revoked."""
        pass
