"""
Mobile Session Manager

Issues, validates, rotates and revokes mobile sessions for one principal
type. A single implementation serves applicants and referrers; the principal
kind only selects the principal repository, the TTL policy and the token
type claim.

Session lifecycle: Active -> Rotated (new secret, same id) -> Revoked | Expired
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from src.app.repositories.principal_repository import IPrincipalRepository, Principal
from src.app.services.secret_hasher import (
    constant_time_equals,
    generate_secret,
    hash_secret,
)
from src.app.services.stateless_session import (
    StatelessRefreshClaims,
    StatelessSessionFallback,
    is_stateless_refresh_token,
)
from src.app.services.token_codec import Clock, TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    MobileSession,
    PrincipalType,
    TokenUse,
    as_utc,
    normalize_token_epoch,
)
from src.domain.errors import (
    InvalidOrExpiredSession,
    PrincipalArchived,
    PrincipalNotFound,
    SessionRefreshUnavailable,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

THIRTY_DAYS_SECONDS = 30 * 24 * 60 * 60
MIN_TTL_SECONDS = 60
REFRESH_SECRET_MIN_LENGTH = 16
USER_AGENT_MAX_LENGTH = 512


@dataclass(frozen=True)
class MobileSessionPolicy:
    """TTL table for one principal type"""

    access_token_ttl_seconds: int = 15 * 60
    refresh_token_ttl_seconds: int = THIRTY_DAYS_SECONDS
    session_ttl_seconds: int = THIRTY_DAYS_SECONDS
    stateless_refresh_token_ttl_seconds: Optional[int] = None
    store_retry_after_seconds: int = 30

    @property
    def stateless_ttl_seconds(self) -> int:
        return self.stateless_refresh_token_ttl_seconds or self.refresh_token_ttl_seconds

    @classmethod
    def from_config(cls, config, principal_type: PrincipalType) -> "MobileSessionPolicy":
        prefix = f"{PrincipalType(principal_type).value.upper()}_MOBILE_"
        return cls(
            access_token_ttl_seconds=getattr(config, f"{prefix}ACCESS_TOKEN_TTL_SECONDS"),
            refresh_token_ttl_seconds=getattr(config, f"{prefix}REFRESH_TOKEN_TTL_SECONDS"),
            session_ttl_seconds=getattr(config, f"{prefix}SESSION_TTL_SECONDS"),
            stateless_refresh_token_ttl_seconds=getattr(
                config, f"{prefix}STATELESS_REFRESH_TOKEN_TTL_SECONDS", None
            ),
        )


@dataclass(frozen=True)
class IssuedMobileSession:
    access_token: str
    access_token_expires_in: int
    refresh_token: str
    refresh_token_expires_in: int
    session_id: Optional[str] = None
    stateless: bool = False


@dataclass(frozen=True)
class RefreshTokenParts:
    session_id: str
    secret_hash: str


def parse_refresh_token(refresh_token: str) -> Optional[RefreshTokenParts]:
    """Split a stateful `<sessionId>.<secret>` token; None if malformed"""
    trimmed = (refresh_token or "").strip()
    # Issued ids and secrets are ASCII
    if not trimmed or not trimmed.isascii() or is_stateless_refresh_token(trimmed):
        return None

    session_id, separator, secret = trimmed.partition(".")
    session_id = session_id.strip()
    secret = secret.strip()
    if not separator or not session_id or len(secret) < REFRESH_SECRET_MIN_LENGTH:
        return None

    return RefreshTokenParts(session_id=session_id, secret_hash=hash_secret(secret))


def normalize_ttl(requested: Optional[float], fallback: int) -> int:
    if requested is None:
        return fallback
    try:
        value = float(requested)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(value) or value <= 0:
        return fallback
    return max(MIN_TTL_SECONDS, int(value))


def cap_refresh_expiry(now: datetime, ttl_seconds: int, session_expires_at: datetime) -> datetime:
    """A refresh token never outlives its session"""
    return min(now + timedelta(seconds=ttl_seconds), session_expires_at)


def seconds_until(expires_at: datetime, now: datetime) -> int:
    return max(1, int((expires_at - now).total_seconds()))


def sanitize_user_agent(value: Optional[str]) -> Optional[str]:
    trimmed = (value or "").strip()
    if not trimmed:
        return None
    return trimmed[:USER_AGENT_MAX_LENGTH]


class MobileSessionManager:
    """
    Session lifecycle for one principal type.

    The caller owns the unit of work: it must be entered (`async with uow`)
    before any coroutine here runs. Principal state (archived, token epoch)
    is read live on every issue, refresh and access-token check.
    """

    def __init__(
        self,
        principal_type: PrincipalType,
        uow: UnitOfWork,
        codec: TokenCodec,
        policy: Optional[MobileSessionPolicy] = None,
        clock: Optional[Clock] = None,
    ):
        self.principal_type = PrincipalType(principal_type)
        self.uow = uow
        self.codec = codec
        self.policy = policy or MobileSessionPolicy()
        self.clock = clock or codec.now
        self.stateless = StatelessSessionFallback(
            codec, self.principal_type, self.policy.stateless_ttl_seconds
        )

    @property
    def principals(self) -> IPrincipalRepository:
        return self.uow.principals(self.principal_type)

    @property
    def label(self) -> str:
        return self.principal_type.value.capitalize()

    def now(self) -> datetime:
        return self.clock()

    def archived_error(self) -> PrincipalArchived:
        return PrincipalArchived(
            f"This {self.principal_type.value} account has been archived "
            "and portal access is no longer available."
        )

    # ------------------------------------------------------------------ #
    # Principal guard
    # ------------------------------------------------------------------ #

    async def get_principal(self, principal_id: str) -> Principal:
        principal = await self.principals.get_by_id(principal_id)
        if principal is None:
            raise PrincipalNotFound(f"{self.label} not found.")
        return principal

    def ensure_usable(self, principal: Principal, presented_epoch: Optional[int] = None) -> None:
        """Reject archived principals and credentials minted under an older epoch"""
        if principal.archived:
            raise self.archived_error()
        if (
            presented_epoch is not None
            and normalize_token_epoch(presented_epoch) != principal.current_token_epoch
        ):
            raise InvalidOrExpiredSession()

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue_access_token(self, principal_id: str, token_epoch: int) -> tuple[str, int]:
        ttl = self.policy.access_token_ttl_seconds
        token = self.codec.issue(
            principal_id,
            self.principal_type,
            ttl,
            token_epoch=token_epoch,
            token_use=TokenUse.access,
        )
        return token, ttl

    async def issue(
        self,
        principal: Principal,
        presented_epoch: Optional[int] = None,
        user_agent: Optional[str] = None,
        refresh_ttl_seconds: Optional[int] = None,
        session_ttl_seconds: Optional[int] = None,
    ) -> IssuedMobileSession:
        """
        Issue a new mobile session for a verified principal.

        Falls back to a stateless refresh token when the session store is
        unavailable; that condition is logged and never surfaced to callers.
        """
        self.ensure_usable(principal, presented_epoch)
        # A failed store write rolls back and expires loaded entities
        principal_id = principal.id
        token_epoch = principal.current_token_epoch

        try:
            return await self._issue_stateful(
                principal_id, token_epoch, user_agent, refresh_ttl_seconds, session_ttl_seconds
            )
        except StoreUnavailable as exc:
            logger.warning(
                f"{self.label} mobile session store unavailable, using stateless "
                f"session fallback: principal_id={principal_id} reason={exc.reason}"
            )
            await self._rollback_quietly()
            return self._issue_stateless(principal_id, token_epoch)

    async def _issue_stateful(
        self,
        principal_id: str,
        token_epoch: int,
        user_agent: Optional[str],
        refresh_ttl_seconds: Optional[int],
        session_ttl_seconds: Optional[int],
    ) -> IssuedMobileSession:
        now = self.now()
        session_ttl = normalize_ttl(session_ttl_seconds, self.policy.session_ttl_seconds)
        refresh_ttl = normalize_ttl(refresh_ttl_seconds, self.policy.refresh_token_ttl_seconds)
        session_expires_at = now + timedelta(seconds=session_ttl)
        refresh_expires_at = cap_refresh_expiry(now, refresh_ttl, session_expires_at)

        session_id = str(uuid4())
        secret = generate_secret()

        await self.uow.sessions.create(
            MobileSession(
                id=session_id,
                principal_type=self.principal_type,
                principal_id=principal_id,
                token_epoch=token_epoch,
                refresh_token_hash=hash_secret(secret),
                session_expires_at=session_expires_at,
                refresh_token_expires_at=refresh_expires_at,
                user_agent=sanitize_user_agent(user_agent),
                created_at=now,
                last_used_at=now,
            )
        )
        await self.uow.commit()

        access_token, access_ttl = self.issue_access_token(principal_id, token_epoch)
        return IssuedMobileSession(
            access_token=access_token,
            access_token_expires_in=access_ttl,
            refresh_token=f"{session_id}.{secret}",
            refresh_token_expires_in=seconds_until(refresh_expires_at, now),
            session_id=session_id,
        )

    def _issue_stateless(self, principal_id: str, token_epoch: int) -> IssuedMobileSession:
        access_token, access_ttl = self.issue_access_token(principal_id, token_epoch)
        refresh = self.stateless.issue(principal_id, token_epoch)
        return IssuedMobileSession(
            access_token=access_token,
            access_token_expires_in=access_ttl,
            refresh_token=refresh.refresh_token,
            refresh_token_expires_in=refresh.refresh_token_expires_in,
            stateless=True,
        )

    # ------------------------------------------------------------------ #
    # Validate + rotate
    # ------------------------------------------------------------------ #

    async def refresh(self, refresh_token: str) -> IssuedMobileSession:
        """
        Validate a refresh token and rotate it.

        Stateless tokens are tried first (no I/O). Stateful tokens are
        rotated with a single conditional update; if that update touches no
        row the token has already been rotated, revoked or expired.

        Raises:
            InvalidOrExpiredSession: token unknown, stale, rotated, or epoch mismatch
            PrincipalArchived: principal archived (stateful session is revoked)
            SessionRefreshUnavailable: stateful token could not be checked
        """
        stateless_claims = self.stateless.validate(refresh_token)
        if stateless_claims is not None:
            return await self._refresh_stateless(stateless_claims)
        if is_stateless_refresh_token(refresh_token):
            raise InvalidOrExpiredSession()

        parts = parse_refresh_token(refresh_token)
        if parts is None:
            raise InvalidOrExpiredSession()

        try:
            return await self._refresh_stateful(parts)
        except StoreUnavailable as exc:
            logger.warning(
                f"{self.label} mobile session store unavailable during refresh: "
                f"session_id={parts.session_id} reason={exc.reason}"
            )
            await self._rollback_quietly()
            raise SessionRefreshUnavailable(retry_after=self.policy.store_retry_after_seconds)

    async def _refresh_stateless(self, claims: StatelessRefreshClaims) -> IssuedMobileSession:
        principal = await self.principals.get_by_id(claims.principal_id)
        if principal is None:
            raise InvalidOrExpiredSession()
        if principal.archived:
            raise self.archived_error()
        # Stateless tokens cannot be revoked; the epoch check is what kills them
        if claims.token_epoch != principal.current_token_epoch:
            raise InvalidOrExpiredSession()
        return self._issue_stateless(principal.id, principal.current_token_epoch)

    async def _refresh_stateful(self, parts: RefreshTokenParts) -> IssuedMobileSession:
        now = self.now()
        session = await self.uow.sessions.get_by_id(parts.session_id)
        if session is None or session.principal_type != self.principal_type:
            raise InvalidOrExpiredSession()

        session_id = session.id
        principal_id = session.principal_id
        session_epoch = normalize_token_epoch(session.token_epoch)
        session_expires_at = as_utc(session.session_expires_at)
        hash_matches = constant_time_equals(parts.secret_hash, session.refresh_token_hash)

        if session.is_revoked or session.is_expired(now):
            if hash_matches:
                await self._raise_if_archived(principal_id)
            raise InvalidOrExpiredSession()
        if not hash_matches:
            raise InvalidOrExpiredSession()

        principal = await self.principals.get_by_id(principal_id)
        if principal is None:
            await self._revoke_quietly(session_id, now)
            raise InvalidOrExpiredSession()
        if principal.archived:
            await self._revoke_quietly(session_id, now)
            raise self.archived_error()
        principal_epoch = principal.current_token_epoch
        if session_epoch != principal_epoch:
            await self._revoke_quietly(session_id, now)
            raise InvalidOrExpiredSession()

        secret = generate_secret()
        refresh_expires_at = cap_refresh_expiry(
            now, self.policy.refresh_token_ttl_seconds, session_expires_at
        )
        updated = await self.uow.sessions.conditional_update(
            session_id,
            parts.secret_hash,
            {
                "refresh_token_hash": hash_secret(secret),
                "refresh_token_expires_at": refresh_expires_at,
                "last_used_at": now,
            },
            now,
        )
        if updated != 1:
            await self._rollback_quietly()
            raise InvalidOrExpiredSession()
        await self.uow.commit()

        access_token, access_ttl = self.issue_access_token(principal_id, principal_epoch)
        return IssuedMobileSession(
            access_token=access_token,
            access_token_expires_in=access_ttl,
            refresh_token=f"{session_id}.{secret}",
            refresh_token_expires_in=seconds_until(refresh_expires_at, now),
            session_id=session_id,
        )

    async def _raise_if_archived(self, principal_id: str) -> None:
        principal = await self.principals.get_by_id(principal_id)
        if principal is not None and principal.archived:
            raise self.archived_error()

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    async def revoke(self, refresh_token: str) -> bool:
        """
        Revoke the stateful session behind a refresh token.

        Stateless and malformed tokens cannot be targeted and return False.
        """
        parts = parse_refresh_token(refresh_token)
        if parts is None:
            return False

        revoked = await self.uow.sessions.revoke_by_refresh_token_hash(
            parts.session_id, parts.secret_hash, self.now()
        )
        await self.uow.commit()
        return revoked

    async def revoke_all(self, principal_id: str) -> int:
        """Sign a principal out of every stateful session"""
        count = await self.uow.sessions.revoke_all_for_principal(
            self.principal_type, principal_id, self.now()
        )
        await self.uow.commit()
        return count

    async def _revoke_quietly(self, session_id: str, now: datetime) -> None:
        try:
            await self.uow.sessions.revoke_by_id(session_id, now)
            await self.uow.commit()
        except StoreUnavailable as exc:
            logger.warning(
                f"Could not revoke {self.principal_type.value} mobile session "
                f"{session_id}: {exc.reason}"
            )
            await self._rollback_quietly()

    async def _rollback_quietly(self) -> None:
        try:
            await self.uow.rollback()
        except StoreUnavailable as exc:
            logger.warning(f"Rollback skipped, store unavailable: {exc.reason}")

    # ------------------------------------------------------------------ #
    # Access tokens
    # ------------------------------------------------------------------ #

    async def authenticate_access_token(self, access_token: str) -> Principal:
        """
        Verify an access token and re-check the principal it names.

        Raises:
            TokenInvalid / TokenExpired: signature, purpose or expiry failure
            InvalidOrExpiredSession: principal gone or epoch bumped since issue
            PrincipalArchived: principal archived since issue
        """
        claims = self.codec.verify(
            access_token, principal_type=self.principal_type, token_use=TokenUse.access
        )
        principal = await self.principals.get_by_id(claims.principal_id)
        if principal is None:
            raise InvalidOrExpiredSession()
        if principal.archived:
            raise self.archived_error()
        if claims.token_epoch != principal.current_token_epoch:
            raise InvalidOrExpiredSession()
        return principal
