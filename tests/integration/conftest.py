import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.depends import get_portal_token_codec, get_rate_limiter, get_unit_of_work
from src.adapter.services.rate_limiter import LimitsRateLimiter
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.secret_hasher import hash_secret
from src.domain.entities import Applicant, MobileSession, PrincipalType, Referrer, TokenUse

APPLICANT_ID = "A1"
APPLICANT_KEY = "applicant-key-A1"
REFERRER_ID = "R1"
REFERRER_EPOCH = 2


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def rate_limiter():
    return LimitsRateLimiter("async+memory://")


@pytest_asyncio.fixture
async def client(db_session, rate_limiter):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def applicant(db_session):
    db_session.add(
        Applicant(
            id=APPLICANT_ID,
            first_name="Ada",
            family_name="Lovelace",
            email="ada@example.com",
            applicant_secret_hash=hash_secret(APPLICANT_KEY),
        )
    )
    await db_session.commit()
    return APPLICANT_ID


@pytest_asyncio.fixture
async def referrer(db_session):
    db_session.add(
        Referrer(
            id=REFERRER_ID,
            name="Grace Hopper",
            email="grace@example.com",
            company="Navy",
            token_epoch=REFERRER_EPOCH,
        )
    )
    await db_session.commit()
    return REFERRER_ID


@pytest.fixture
def portal_token():
    """Mint a referrer portal link token the way the portal does"""
    from config import ApplicationConfig

    def mint(referrer_id=REFERRER_ID, token_epoch=REFERRER_EPOCH):
        return get_portal_token_codec().issue(
            referrer_id,
            PrincipalType.referrer,
            ApplicationConfig.REFERRER_PORTAL_TOKEN_TTL_SECONDS,
            token_epoch=token_epoch,
            token_use=TokenUse.portal,
        )

    return mint


@pytest.fixture
def admin_headers():
    from config import ApplicationConfig

    return {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


@pytest.fixture
def session_store(db_session):
    """Take the mobile_sessions table away and bring it back"""

    class SessionStoreControl:
        async def take_down(self):
            conn = await db_session.connection()
            await conn.run_sync(MobileSession.__table__.drop)
            await db_session.commit()

        async def bring_back(self):
            conn = await db_session.connection()
            await conn.run_sync(MobileSession.__table__.create)
            await db_session.commit()

    return SessionStoreControl()
