from abc import ABC, abstractmethod

from src.app.repositories.mobile_session_repository import IMobileSessionRepository
from src.app.repositories.principal_repository import IPrincipalRepository
from src.domain.entities import PrincipalType


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    sessions: IMobileSessionRepository
    applicants: IPrincipalRepository
    referrers: IPrincipalRepository

    def principals(self, principal_type: PrincipalType) -> IPrincipalRepository:
        if PrincipalType(principal_type) == PrincipalType.applicant:
            return self.applicants
        return self.referrers

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
