"""
Mobile Session Entity

One row per logical sign-in on one device.
"""

from datetime import UTC, datetime
from typing import Optional
from uuid import uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from .enums import PrincipalType


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class MobileSession(SQLModel, table=True):
    """
    Mobile session entity - stores the hash of the current refresh secret.

    Business Rules:
    - Only sha256(secret) is stored, never the secret itself
    - refresh_token_hash is replaced on every rotation (one valid secret)
    - refresh_token_expires_at never exceeds session_expires_at
    - session_expires_at is set once at creation and never moves
    - revoked_at set means the session is permanently unusable
    - token_epoch records the principal epoch observed at issuance
    - Rows are never deleted here; expiry is logical
    """

    __tablename__ = "mobile_sessions"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)

    principal_type: PrincipalType = Field(nullable=False)
    principal_id: str = Field(nullable=False, index=True, max_length=64)
    token_epoch: int = Field(default=1)

    refresh_token_hash: str = Field(max_length=64)  # SHA-256 hex

    session_expires_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    refresh_token_expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    revoked_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    user_agent: Optional[str] = Field(default=None, max_length=512)

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), sa_column=Column(DateTime(timezone=True))
    )
    last_used_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    __table_args__ = (
        Index("idx_mobile_session_principal", "principal_type", "principal_id"),
        Index("idx_mobile_session_expires_at", "session_expires_at"),
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        return (
            as_utc(self.session_expires_at) <= now
            or as_utc(self.refresh_token_expires_at) <= now
        )
