"""
Mobile Auth Use Case DTOs (Data Transfer Objects)

Commands and responses for the mobile exchange/refresh/logout/me flows.
Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase aliases"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Command DTOs
# ============================================================================


class ApplicantExchangeCommand(CamelModel):
    """Applicant credential presented for a mobile session"""

    applicant_id: str
    applicant_key: str
    user_agent: Optional[str] = None


class ReferrerExchangeCommand(CamelModel):
    """Referrer portal link token presented for a mobile session"""

    portal_token: str
    user_agent: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class MobileSessionResponse(CamelModel):
    """Token pair returned by refresh"""

    ok: bool = True
    access_token: str
    access_token_expires_in: int
    refresh_token: str
    refresh_token_expires_in: int

    @classmethod
    def from_issued(cls, issued, **extra) -> "MobileSessionResponse":
        return cls(
            access_token=issued.access_token,
            access_token_expires_in=issued.access_token_expires_in,
            refresh_token=issued.refresh_token,
            refresh_token_expires_in=issued.refresh_token_expires_in,
            **extra,
        )


class MobileExchangeResponse(MobileSessionResponse):
    """Token pair plus the principal summary returned by exchange"""

    principal_summary: Dict[str, Any]


class LogoutResponse(CamelModel):
    ok: bool = True


class MobileContextResponse(CamelModel):
    """Response for the `me` endpoint"""

    ok: bool = True
    principal_summary: Dict[str, Any]
