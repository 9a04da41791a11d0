"""
Token Codec

Signs and verifies the self-contained tokens used by mobile auth: access
tokens, stateless refresh tokens and referrer portal link tokens. Nothing is
persisted; validity is a pure function of the token, the key and the clock.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional

from jose import jwt
from jose.exceptions import JOSEError

from src.domain.entities import PrincipalType, TokenUse, normalize_token_epoch
from src.domain.errors import TokenExpired, TokenInvalid

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def is_timestamp(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a signed token"""

    principal_id: str
    principal_type: PrincipalType
    token_epoch: int
    issued_at: datetime
    expires_at: datetime
    token_use: TokenUse


class TokenCodec:
    """
    HMAC-signed JWT codec.

    The signing key, algorithm and clock are injected so tests can use
    deterministic keys and frozen time. Expiry is checked explicitly against
    the injected clock on every verification.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        clock: Optional[Clock] = None,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    def issue(
        self,
        principal_id: str,
        principal_type: PrincipalType,
        ttl_seconds: int,
        token_epoch: int = 1,
        token_use: TokenUse = TokenUse.access,
    ) -> str:
        """
        Sign a token for a principal.

        Args:
            principal_id: Public id of the applicant or referrer
            principal_type: Which principal kind the token is bound to
            ttl_seconds: Lifetime from now
            token_epoch: Principal token epoch observed by the issuer
            token_use: What the token may be used for

        Returns:
            Compact JWT string
        """
        now = self.now()
        expires_at = now + timedelta(seconds=int(ttl_seconds))
        payload = {
            "sub": str(principal_id),
            "typ": PrincipalType(principal_type).value,
            "ver": normalize_token_epoch(token_epoch),
            "use": TokenUse(token_use).value,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(
        self,
        token: str,
        principal_type: Optional[PrincipalType] = None,
        token_use: TokenUse = TokenUse.access,
    ) -> TokenClaims:
        """
        Verify signature, purpose, principal kind and expiry.

        Raises:
            TokenInvalid: token is malformed, forged, or minted for another use
            TokenExpired: token is authentic but past its expiry
        """
        # Compact JWS serialization is ASCII only
        if not token or not isinstance(token, str) or not token.isascii():
            raise TokenInvalid()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
        except (JOSEError, ValueError):
            raise TokenInvalid()

        principal_id = payload.get("sub")
        expires = payload.get("exp")
        issued = payload.get("iat")
        if not isinstance(principal_id, str) or not principal_id.strip():
            raise TokenInvalid()
        if not is_timestamp(expires) or not is_timestamp(issued):
            raise TokenInvalid()
        if payload.get("use") != TokenUse(token_use).value:
            raise TokenInvalid()

        try:
            claimed_type = PrincipalType(payload.get("typ"))
        except ValueError:
            raise TokenInvalid()
        if principal_type is not None and claimed_type != PrincipalType(principal_type):
            raise TokenInvalid()

        expires_at = datetime.fromtimestamp(expires, tz=UTC)
        if expires_at <= self.now():
            raise TokenExpired()

        return TokenClaims(
            principal_id=principal_id,
            principal_type=claimed_type,
            token_epoch=normalize_token_epoch(payload.get("ver")),
            issued_at=datetime.fromtimestamp(issued, tz=UTC),
            expires_at=expires_at,
            token_use=TokenUse(token_use),
        )
