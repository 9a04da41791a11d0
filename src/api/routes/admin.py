"""
Admin API Routes - Principal Session Administration

Support tooling for rotating token epochs, signing principals out
everywhere and archiving principals. Authentication is via Admin API Key,
not mobile access tokens.
"""

import logging

from fastapi import APIRouter, Depends, status

from src.api.error import ServerError, to_client_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.admin import (
    ArchivePrincipalResponse,
    ArchivePrincipalUseCase,
    RevokePrincipalSessionsResponse,
    RevokePrincipalSessionsUseCase,
    RotateTokenEpochResponse,
    RotateTokenEpochUseCase,
)
from src.depends import get_unit_of_work
from src.domain.entities import PrincipalType
from src.domain.errors import AuthError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/principals", tags=["Admin"])


@router.post(
    "/{principal_type}/{principal_id}/rotate-token-epoch",
    status_code=status.HTTP_200_OK,
    response_model=RotateTokenEpochResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def rotate_token_epoch(
    principal_type: PrincipalType,
    principal_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Rotate Token Epoch

    Invalidates every session, refresh token, access token and portal link
    issued to the principal before this call.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: PRINCIPAL_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    use_case = RotateTokenEpochUseCase(uow)
    try:
        return await use_case.execute(principal_type, principal_id)
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to rotate token epoch")
        raise ServerError("Unable to rotate token epoch.")


@router.post(
    "/{principal_type}/{principal_id}/revoke-sessions",
    status_code=status.HTTP_200_OK,
    response_model=RevokePrincipalSessionsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def revoke_sessions(
    principal_type: PrincipalType,
    principal_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Sign Out Everywhere

    Revokes every active stateful mobile session of the principal.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: PRINCIPAL_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    use_case = RevokePrincipalSessionsUseCase(uow)
    try:
        return await use_case.execute(principal_type, principal_id)
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to revoke principal sessions")
        raise ServerError("Unable to revoke sessions.")


@router.post(
    "/{principal_type}/{principal_id}/archive",
    status_code=status.HTTP_200_OK,
    response_model=ArchivePrincipalResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def archive_principal(
    principal_type: PrincipalType,
    principal_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Archive Principal

    Archives the principal and revokes all of its sessions.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: PRINCIPAL_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    use_case = ArchivePrincipalUseCase(uow)
    try:
        return await use_case.execute(principal_type, principal_id)
    except AuthError as error:
        raise to_client_error(error)
    except Exception:
        logger.exception("Failed to archive principal")
        raise ServerError("Unable to archive principal.")
