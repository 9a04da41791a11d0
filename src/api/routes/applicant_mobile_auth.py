import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import Field

from src.api.error import ServerError, to_client_error
from src.api.utils.rate_limit import rate_limit
from src.app.services.mobile_session_manager import MobileSessionManager
from src.app.use_cases.mobile_auth import (
    ApplicantExchangeCommand,
    ExchangeApplicantCredentialUseCase,
    LoadMobileContextUseCase,
    LogoutMobileSessionUseCase,
    LogoutResponse,
    MobileContextResponse,
    MobileExchangeResponse,
    MobileSessionResponse,
    RefreshMobileSessionUseCase,
)
from src.app.use_cases.mobile_auth.dtos import CamelModel
from src.depends import get_applicant_session_manager
from src.domain.entities import PrincipalType
from src.domain.errors import AuthError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applicant/mobile/auth", tags=["Applicant Mobile Auth"])

bearer = HTTPBearer(auto_error=False)


class ApplicantExchangeRequest(CamelModel):
    """Applicant exchange HTTP request payload"""

    applicant_id: str = Field(..., description="Applicant public id (iRAIN)")
    applicant_key: str = Field(..., description="Applicant shared secret")


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., description="Current refresh token")


class LogoutRequest(CamelModel):
    refresh_token: str = Field("", description="Refresh token to revoke")


@router.post(
    "/exchange",
    status_code=status.HTTP_200_OK,
    response_model=MobileExchangeResponse,
    dependencies=[
        Depends(rate_limit("applicant-mobile-exchange", PrincipalType.applicant))
    ],
)
async def exchange(
    request: ApplicantExchangeRequest,
    user_agent: Optional[str] = Header(None),
    manager: MobileSessionManager = Depends(get_applicant_session_manager),
):
    """
    Applicant Mobile Sign-in

    Exchanges applicant id + applicant key for an access/refresh token pair.
    Falls back to a stateless refresh token if the session store is down.

    Raises:
        - 400 Bad Request: Missing credentials
        - 401 Unauthorized: Invalid applicant key
        - 403 Forbidden: Applicant archived
        - 404 Not Found: Unknown applicant
        - 429 Too Many Requests: Rate limited
        - 500 Internal Server Error: Server error
    """
    command = ApplicantExchangeCommand(
        applicant_id=request.applicant_id,
        applicant_key=request.applicant_key,
        user_agent=user_agent,
    )

    use_case = ExchangeApplicantCredentialUseCase(manager)
    try:
        return await use_case.execute(command)
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to exchange applicant mobile session")
        raise ServerError("Unable to sign in right now. Please try again later.")


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=MobileSessionResponse,
    dependencies=[
        Depends(rate_limit("applicant-mobile-refresh", PrincipalType.applicant))
    ],
)
async def refresh(
    request: RefreshRequest,
    manager: MobileSessionManager = Depends(get_applicant_session_manager),
):
    """
    Refresh Applicant Mobile Session

    Rotates the refresh token; the presented token stops working.

    Raises:
        - 401 Unauthorized: Invalid, rotated, revoked or expired session
        - 403 Forbidden: Applicant archived (session revoked server-side)
        - 503 Service Unavailable: Session store unreachable, retry later
    """
    use_case = RefreshMobileSessionUseCase(manager)
    try:
        return await use_case.execute(request.refresh_token)
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to refresh applicant mobile session")
        raise ServerError("Unable to refresh session right now. Please sign in again.")


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: LogoutRequest,
    manager: MobileSessionManager = Depends(get_applicant_session_manager),
):
    """Revoke the session behind a refresh token. Always {ok: true} unless the store fails."""
    use_case = LogoutMobileSessionUseCase(manager)
    try:
        return await use_case.execute(request.refresh_token)
    except Exception:
        logger.exception("Failed to revoke applicant mobile session")
        raise ServerError("Unable to end session.")


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MobileContextResponse)
async def me(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    manager: MobileSessionManager = Depends(get_applicant_session_manager),
):
    """
    Current Applicant

    Raises:
        - 401 Unauthorized: Missing, invalid or expired access token, or epoch bumped
        - 403 Forbidden: Applicant archived
    """
    use_case = LoadMobileContextUseCase(manager)
    try:
        return await use_case.execute(credentials.credentials if credentials else "")
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to load applicant mobile context")
        raise ServerError("Unable to load account right now. Please try again later.")
