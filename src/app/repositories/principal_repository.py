from abc import ABC, abstractmethod
from typing import Optional, Union

from src.domain.entities import Applicant, Referrer

Principal = Union[Applicant, Referrer]


class IPrincipalRepository(ABC):
    """
    Principal record interface - application layer.

    Records are owned by the external record store. The session core only
    reads archived/token_epoch, except for the administrative epoch bump
    and archive operations.
    """

    @abstractmethod
    async def get_by_id(self, principal_id: str) -> Optional[Principal]:
        """Get principal by public ID"""
        pass

    @abstractmethod
    async def bump_token_epoch(self, principal_id: str) -> Optional[int]:
        """Atomically increment token_epoch. Returns the new epoch, or None if not found."""
        pass

    @abstractmethod
    async def archive(self, principal_id: str) -> bool:
        """Mark principal archived. Returns True if the principal exists."""
        pass
