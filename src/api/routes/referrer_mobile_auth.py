import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import Field

from src.api.error import ServerError, to_client_error
from src.api.utils.rate_limit import rate_limit
from src.app.services.mobile_session_manager import MobileSessionManager
from src.app.services.token_codec import TokenCodec
from src.app.use_cases.mobile_auth import (
    ExchangeReferrerPortalTokenUseCase,
    LoadMobileContextUseCase,
    LogoutMobileSessionUseCase,
    LogoutResponse,
    MobileContextResponse,
    MobileExchangeResponse,
    MobileSessionResponse,
    ReferrerExchangeCommand,
    RefreshMobileSessionUseCase,
)
from src.app.use_cases.mobile_auth.dtos import CamelModel
from src.depends import get_portal_token_codec, get_referrer_session_manager
from src.domain.entities import PrincipalType
from src.domain.errors import AuthError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/referrer/mobile/auth", tags=["Referrer Mobile Auth"])

bearer = HTTPBearer(auto_error=False)


class ReferrerExchangeRequest(CamelModel):
    """Referrer exchange HTTP request payload"""

    portal_token: str = Field(..., description="Signed referrer portal link token")


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., description="Current refresh token")


class LogoutRequest(CamelModel):
    refresh_token: str = Field("", description="Refresh token to revoke")


@router.post(
    "/exchange",
    status_code=status.HTTP_200_OK,
    response_model=MobileExchangeResponse,
    dependencies=[
        Depends(rate_limit("referrer-mobile-exchange", PrincipalType.referrer))
    ],
)
async def exchange(
    request: ReferrerExchangeRequest,
    user_agent: Optional[str] = Header(None),
    manager: MobileSessionManager = Depends(get_referrer_session_manager),
    portal_codec: TokenCodec = Depends(get_portal_token_codec),
):
    """
    Referrer Mobile Sign-in

    Exchanges a portal link token for an access/refresh token pair. The
    mobile session does not inherit the portal link's lifetime.

    Raises:
        - 400 Bad Request: Missing portal token
        - 401 Unauthorized: Invalid or expired portal token, or stale token version
        - 403 Forbidden: Referrer archived
        - 404 Not Found: Unknown referrer
        - 429 Too Many Requests: Rate limited
        - 500 Internal Server Error: Server error
    """
    command = ReferrerExchangeCommand(portal_token=request.portal_token, user_agent=user_agent)

    use_case = ExchangeReferrerPortalTokenUseCase(manager, portal_codec)
    try:
        return await use_case.execute(command)
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to exchange referrer mobile session")
        raise ServerError("Unable to sign in right now. Please try again later.")


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=MobileSessionResponse,
    dependencies=[
        Depends(rate_limit("referrer-mobile-refresh", PrincipalType.referrer))
    ],
)
async def refresh(
    request: RefreshRequest,
    manager: MobileSessionManager = Depends(get_referrer_session_manager),
):
    """
    Refresh Referrer Mobile Session

    Rotates the refresh token; the presented token stops working.

    Raises:
        - 401 Unauthorized: Invalid, rotated, revoked or expired session
        - 403 Forbidden: Referrer archived (session revoked server-side)
        - 503 Service Unavailable: Session store unreachable, retry later
    """
    use_case = RefreshMobileSessionUseCase(manager)
    try:
        return await use_case.execute(request.refresh_token)
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to refresh referrer mobile session")
        raise ServerError("Unable to refresh session right now. Please sign in again.")


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: LogoutRequest,
    manager: MobileSessionManager = Depends(get_referrer_session_manager),
):
    """Revoke the session behind a refresh token. Always {ok: true} unless the store fails."""
    use_case = LogoutMobileSessionUseCase(manager)
    try:
        return await use_case.execute(request.refresh_token)
    except Exception:
        logger.exception("Failed to revoke referrer mobile session")
        raise ServerError("Unable to end session.")


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MobileContextResponse)
async def me(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    manager: MobileSessionManager = Depends(get_referrer_session_manager),
):
    """
    Current Referrer

    Raises:
        - 401 Unauthorized: Missing, invalid or expired access token, or epoch bumped
        - 403 Forbidden: Referrer archived
    """
    use_case = LoadMobileContextUseCase(manager)
    try:
        return await use_case.execute(credentials.credentials if credentials else "")
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to load referrer mobile context")
        raise ServerError("Unable to load account right now. Please try again later.")
