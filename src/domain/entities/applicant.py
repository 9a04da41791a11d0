"""
Applicant Entity

Read model of an applicant record owned by the applicant record store.
"""

from datetime import UTC, datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, SQLModel


def normalize_token_epoch(value: Optional[int]) -> int:
    """Missing or non-positive epochs count as the first epoch."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return 1
    return parsed if parsed > 0 else 1


class Applicant(SQLModel, table=True):
    """
    Applicant entity - authenticates with a shared applicant key.

    Business Rules:
    - id is the public applicant id (iRAIN)
    - applicant_secret_hash is sha256(applicantKey) as lowercase hex
    - archived applicants cannot exchange or refresh mobile sessions
    - bumping token_epoch invalidates every token issued before the bump
    """

    __tablename__ = "applicants"

    id: str = Field(primary_key=True, max_length=64)
    first_name: str = Field(default="", max_length=255)
    family_name: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=255)

    applicant_secret_hash: Optional[str] = Field(default=None, max_length=64)
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
            "irain": self.id,
            "firstName": self.first_name or "",
            "lastName": self.family_name or "",
            "email": self.email or "",
        }
