"""
Stateless Session Fallback

Self-contained refresh tokens used when the session store cannot be reached.
They are never persisted and cannot be revoked one by one; bumping the
principal's token epoch is the only way to invalidate them early.
"""

from dataclasses import dataclass
from typing import Optional

from src.app.services.token_codec import TokenCodec
from src.domain.entities import PrincipalType, TokenUse
from src.domain.errors import TokenInvalid

STATELESS_REFRESH_TOKEN_PREFIX = "stateless:"


@dataclass(frozen=True)
class IssuedRefreshToken:
    refresh_token: str
    refresh_token_expires_in: int


@dataclass(frozen=True)
class StatelessRefreshClaims:
    principal_id: str
    token_epoch: int


def is_stateless_refresh_token(refresh_token: str) -> bool:
    return (refresh_token or "").strip().startswith(STATELESS_REFRESH_TOKEN_PREFIX)


class StatelessSessionFallback:
    """Issues and validates `stateless:`-prefixed refresh tokens for one principal type"""

    def __init__(self, codec: TokenCodec, principal_type: PrincipalType, ttl_seconds: int):
        self.codec = codec
        self.principal_type = principal_type
        self.ttl_seconds = ttl_seconds

    def issue(self, principal_id: str, token_epoch: int) -> IssuedRefreshToken:
        token = self.codec.issue(
            principal_id,
            self.principal_type,
            self.ttl_seconds,
            token_epoch=token_epoch,
            token_use=TokenUse.refresh,
        )
        return IssuedRefreshToken(
            refresh_token=f"{STATELESS_REFRESH_TOKEN_PREFIX}{token}",
            refresh_token_expires_in=self.ttl_seconds,
        )

    def validate(self, refresh_token: str) -> Optional[StatelessRefreshClaims]:
        """Return the embedded principal and epoch, or None if the token is not a valid stateless token"""
        trimmed = (refresh_token or "").strip()
        if not trimmed.startswith(STATELESS_REFRESH_TOKEN_PREFIX):
            return None

        token = trimmed[len(STATELESS_REFRESH_TOKEN_PREFIX):].strip()
        if not token:
            return None

        try:
            claims = self.codec.verify(
                token, principal_type=self.principal_type, token_use=TokenUse.refresh
            )
        except TokenInvalid:
            return None

        return StatelessRefreshClaims(
            principal_id=claims.principal_id, token_epoch=claims.token_epoch
        )
