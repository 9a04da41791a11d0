"""
Referrer Entity

Read model of a referrer record owned by the referrer record store.
"""

from datetime import UTC, datetime

from sqlmodel import Column, DateTime, Field, SQLModel

from .applicant import normalize_token_epoch


class Referrer(SQLModel, table=True):
    """
    Referrer entity - authenticates with a signed portal link token.

    Business Rules:
    - id is the public referrer id (iRREF)
    - token_epoch is the portal token version embedded in portal links
    - a portal link is only accepted while its version equals token_epoch
    - archived referrers cannot exchange or refresh mobile sessions
    """

    __tablename__ = "referrers"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=255)
    company: str = Field(default="", max_length=255)

    archived: bool = Field(default=False)
    token_epoch: int = Field(default=1)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), sa_column=Column(DateTime(timezone=True))
    )

    @property
    def current_token_epoch(self) -> int:
        return normalize_token_epoch(self.token_epoch)

    def summary(self) -> dict:
        return {
            "irref": self.id,
            "name": self.name or "",
            "email": self.email or "",
            "company": self.company or "",
        }
