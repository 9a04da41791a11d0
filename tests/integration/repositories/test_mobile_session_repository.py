import asyncio
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.mobile_session_repository import MobileSessionRepository
from src.app.services.secret_hasher import hash_secret
from src.domain.entities import MobileSession, PrincipalType

CURRENT_HASH = hash_secret("current-refresh-secret")


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def now():
    return datetime.now(UTC).replace(microsecond=0)


@pytest_asyncio.fixture
async def seed_session(session_factory, now):
    """Store a mobile session row through the repository"""

    async def seed(session_id="session-1", **overrides):
        values = dict(
            id=session_id,
            principal_type=PrincipalType.applicant,
            principal_id="A1",
            refresh_token_hash=CURRENT_HASH,
            session_expires_at=now + timedelta(days=30),
            refresh_token_expires_at=now + timedelta(days=7),
            created_at=now,
        )
        values.update(overrides)
        async with session_factory() as session:
            await MobileSessionRepository(session).create(MobileSession(**values))
            await session.commit()
        return session_id

    return seed


async def rotate(session_factory, session_id, expected_hash, new_secret, now):
    async with session_factory() as session:
        count = await MobileSessionRepository(session).conditional_update(
            session_id,
            expected_hash,
            {"refresh_token_hash": hash_secret(new_secret), "last_used_at": now},
            now,
        )
        await session.commit()
        return count


async def stored_hash(session_factory, session_id):
    async with session_factory() as session:
        row = await MobileSessionRepository(session).get_by_id(session_id)
        return row.refresh_token_hash


@pytest.mark.asyncio
async def test_conditional_update_rotates_matching_row(session_factory, seed_session, now):
    session_id = await seed_session()

    count = await rotate(session_factory, session_id, CURRENT_HASH, "next-secret", now)

    assert count == 1
    assert await stored_hash(session_factory, session_id) == hash_secret("next-secret")


@pytest.mark.asyncio
async def test_concurrent_rotations_apply_once(session_factory, seed_session, now):
    """Two sessions presenting the same hash: the store applies exactly one"""
    session_id = await seed_session()

    counts = await asyncio.gather(
        rotate(session_factory, session_id, CURRENT_HASH, "winner-a", now),
        rotate(session_factory, session_id, CURRENT_HASH, "winner-b", now),
    )

    assert sorted(counts) == [0, 1]
    assert await stored_hash(session_factory, session_id) in {
        hash_secret("winner-a"),
        hash_secret("winner-b"),
    }


@pytest.mark.asyncio
async def test_rotated_hash_cannot_be_reused(session_factory, seed_session, now):
    session_id = await seed_session()
    await rotate(session_factory, session_id, CURRENT_HASH, "next-secret", now)

    assert await rotate(session_factory, session_id, CURRENT_HASH, "replay", now) == 0
    assert await stored_hash(session_factory, session_id) == hash_secret("next-secret")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field", ["revoked_at", "refresh_token_expires_at", "session_expires_at"]
)
async def test_conditional_update_skips_unusable_rows(session_factory, seed_session, now, field):
    """Revoked rows and rows past either expiry are never rotated"""
    session_id = await seed_session(**{field: now - timedelta(seconds=1)})

    count = await rotate(session_factory, session_id, CURRENT_HASH, "next-secret", now)

    assert count == 0
    assert await stored_hash(session_factory, session_id) == CURRENT_HASH


@pytest.mark.asyncio
async def test_conditional_update_wrong_hash(session_factory, seed_session, now):
    session_id = await seed_session()

    assert await rotate(session_factory, session_id, hash_secret("other"), "next-secret", now) == 0


@pytest.mark.asyncio
async def test_conditional_update_rejects_non_rotatable_fields(session_factory, seed_session, now):
    session_id = await seed_session()

    async with session_factory() as session:
        with pytest.raises(ValueError):
            await MobileSessionRepository(session).conditional_update(
                session_id, CURRENT_HASH, {"principal_id": "A2"}, now
            )
