import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.mobile_session_repository import MobileSessionRepository
from src.adapter.repositories.principal_repository import ApplicantRepository, ReferrerRepository
from src.adapter.repositories.session_store_guard import session_store_guard
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession, store_timeout_seconds: float = 5):
        self.session = session
        self.store_timeout_seconds = store_timeout_seconds

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.sessions = MobileSessionRepository(self.session, self.store_timeout_seconds)
        self.applicants = ApplicantRepository(self.session, self.store_timeout_seconds)
        self.referrers = ReferrerRepository(self.session, self.store_timeout_seconds)
        return self

    async def __aexit__(self, *args):
        try:
            await self.rollback()
        except StoreUnavailable as exc:
            logger.warning(f"Rollback skipped, store unavailable: {exc.reason}")

    async def commit(self):
        async with session_store_guard(self.store_timeout_seconds):
            await self.session.commit()

    async def rollback(self):
        async with session_store_guard(self.store_timeout_seconds):
            await self.session.rollback()
