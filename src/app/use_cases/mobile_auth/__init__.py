"""
Mobile Auth Use Cases

Exchange, refresh, logout and `me` for applicant and referrer mobile clients.
"""

from .exchange_applicant_credential_use_case import ExchangeApplicantCredentialUseCase
from .exchange_referrer_portal_token_use_case import ExchangeReferrerPortalTokenUseCase
from .refresh_mobile_session_use_case import RefreshMobileSessionUseCase
from .logout_mobile_session_use_case import LogoutMobileSessionUseCase
from .load_mobile_context_use_case import LoadMobileContextUseCase
from .dtos import (
    ApplicantExchangeCommand,
    ReferrerExchangeCommand,
    MobileSessionResponse,
    MobileExchangeResponse,
    LogoutResponse,
    MobileContextResponse,
)

__all__ = [
    # Use Cases
    "ExchangeApplicantCredentialUseCase",
    "ExchangeReferrerPortalTokenUseCase",
    "RefreshMobileSessionUseCase",
    "LogoutMobileSessionUseCase",
    "LoadMobileContextUseCase",
    # DTOs - Commands
    "ApplicantExchangeCommand",
    "ReferrerExchangeCommand",
    # DTOs - Responses
    "MobileSessionResponse",
    "MobileExchangeResponse",
    "LogoutResponse",
    "MobileContextResponse",
]
