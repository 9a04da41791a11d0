"""
Unit tests for Token Codec
"""

from datetime import timedelta

import pytest
from jose import jwt

from src.app.services.token_codec import TokenCodec
from src.domain.entities import PrincipalType, TokenUse
from src.domain.errors import TokenExpired, TokenInvalid


def test_issue_and_verify_access_token(codec, clock):
    token = codec.issue("A1", PrincipalType.applicant, 900, token_epoch=3)

    claims = codec.verify(token, principal_type=PrincipalType.applicant)

    assert claims.principal_id == "A1"
    assert claims.principal_type == PrincipalType.applicant
    assert claims.token_epoch == 3
    assert claims.token_use == TokenUse.access
    assert claims.expires_at == clock.now + timedelta(seconds=900)


def test_expiry_is_checked_against_injected_clock(codec, clock):
    token = codec.issue("A1", PrincipalType.applicant, 60)

    clock.advance(59)
    assert codec.verify(token).principal_id == "A1"

    clock.advance(1)
    with pytest.raises(TokenExpired):
        codec.verify(token)


def test_expired_is_a_kind_of_invalid(codec, clock):
    token = codec.issue("A1", PrincipalType.applicant, 60)
    clock.advance(3600)

    with pytest.raises(TokenInvalid):
        codec.verify(token)


def test_wrong_key_is_invalid(codec, clock):
    other = TokenCodec("another-secret", clock=clock)
    token = other.issue("A1", PrincipalType.applicant, 900)

    with pytest.raises(TokenInvalid):
        codec.verify(token)


def test_wrong_principal_type_is_invalid(codec):
    token = codec.issue("R1", PrincipalType.referrer, 900)

    with pytest.raises(TokenInvalid):
        codec.verify(token, principal_type=PrincipalType.applicant)


def test_refresh_token_cannot_be_used_as_access_token(codec):
    token = codec.issue("A1", PrincipalType.applicant, 900, token_use=TokenUse.refresh)

    with pytest.raises(TokenInvalid):
        codec.verify(token, token_use=TokenUse.access)
    assert codec.verify(token, token_use=TokenUse.refresh).token_use == TokenUse.refresh


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c", "a\ud800.b.c", "\u00e9.b.c"])
def test_malformed_token_is_invalid(codec, token):
    with pytest.raises(TokenInvalid):
        codec.verify(token)


def test_missing_claims_are_invalid(codec, clock):
    exp = int((clock.now + timedelta(seconds=900)).timestamp())
    token = jwt.encode({"exp": exp, "use": "access", "typ": "applicant"}, "unit-test-access-secret")

    with pytest.raises(TokenInvalid):
        codec.verify(token)


def test_missing_issued_at_is_invalid(codec, clock):
    exp = int((clock.now + timedelta(seconds=900)).timestamp())
    token = jwt.encode(
        {"sub": "A1", "exp": exp, "use": "access", "typ": "applicant", "ver": 1},
        "unit-test-access-secret",
    )

    with pytest.raises(TokenInvalid):
        codec.verify(token)


def test_issued_at_is_the_signing_time(codec, clock):
    token = codec.issue("A1", PrincipalType.applicant, 900)

    assert codec.verify(token).issued_at == clock.now


def test_non_positive_epoch_normalizes_to_one(codec):
    token = codec.issue("A1", PrincipalType.applicant, 900, token_epoch=0)

    assert codec.verify(token).token_epoch == 1


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenCodec("")
