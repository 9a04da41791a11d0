import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.services.mobile_session_manager import MobileSessionManager, MobileSessionPolicy
from src.app.services.secret_hasher import hash_secret
from src.app.services.token_codec import TokenCodec
from src.domain.entities import Applicant, PrincipalType, Referrer
from tests.fixtures.fakes import FakeUnitOfWork, FrozenClock


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    uow.principals = MagicMock(
        side_effect=lambda principal_type: (
            uow.applicants
            if PrincipalType(principal_type) == PrincipalType.applicant
            else uow.referrers
        )
    )
    return uow


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def codec(clock):
    return TokenCodec("unit-test-access-secret", clock=clock)


@pytest.fixture
def portal_codec(clock):
    return TokenCodec("unit-test-portal-secret", clock=clock)


@pytest.fixture
def policy():
    return MobileSessionPolicy(
        access_token_ttl_seconds=900,
        refresh_token_ttl_seconds=30 * 24 * 60 * 60,
        session_ttl_seconds=30 * 24 * 60 * 60,
    )


@pytest.fixture
def fake_uow():
    return FakeUnitOfWork()


@pytest.fixture
def applicant(fake_uow):
    return fake_uow.applicants.add(
        Applicant(
            id="A1",
            first_name="Ada",
            family_name="Lovelace",
            email="ada@example.com",
            applicant_secret_hash=hash_secret("applicant-key-A1"),
            token_epoch=1,
        )
    )


@pytest.fixture
def referrer(fake_uow):
    return fake_uow.referrers.add(
        Referrer(id="R1", name="Grace Hopper", email="grace@example.com", company="Navy", token_epoch=2)
    )


@pytest.fixture
def applicant_manager(fake_uow, codec, policy, clock):
    return MobileSessionManager(PrincipalType.applicant, fake_uow, codec, policy, clock)


@pytest.fixture
def referrer_manager(fake_uow, codec, policy, clock):
    return MobileSessionManager(PrincipalType.referrer, fake_uow, codec, policy, clock)
