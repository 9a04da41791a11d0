from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.rate_limiter import LimitsRateLimiter
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.mobile_session_manager import MobileSessionManager, MobileSessionPolicy
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import PrincipalType

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Counters must outlive a single request
rate_limiter = LimitsRateLimiter(
    storage_uri=ApplicationConfig.RATE_LIMIT_STORAGE_URI,
    enabled=ApplicationConfig.RATE_LIMIT_ENABLED,
)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(
            session, store_timeout_seconds=ApplicationConfig.SESSION_STORE_TIMEOUT_SECONDS
        )


def get_access_token_codec() -> TokenCodec:
    return TokenCodec(ApplicationConfig.ACCESS_TOKEN_SECRET, ApplicationConfig.TOKEN_ALGORITHM)


def get_portal_token_codec() -> TokenCodec:
    return TokenCodec(ApplicationConfig.REFERRER_PORTAL_SECRET, ApplicationConfig.TOKEN_ALGORITHM)


def get_rate_limiter() -> IRateLimiter:
    return rate_limiter


def get_applicant_session_manager(
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_access_token_codec),
) -> MobileSessionManager:
    return MobileSessionManager(
        PrincipalType.applicant,
        uow,
        codec,
        MobileSessionPolicy.from_config(ApplicationConfig, PrincipalType.applicant),
    )


def get_referrer_session_manager(
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_access_token_codec),
) -> MobileSessionManager:
    return MobileSessionManager(
        PrincipalType.referrer,
        uow,
        codec,
        MobileSessionPolicy.from_config(ApplicationConfig, PrincipalType.referrer),
    )
