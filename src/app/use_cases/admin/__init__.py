"""Admin use cases for principal session administration."""

from .rotate_token_epoch_use_case import RotateTokenEpochUseCase, RotateTokenEpochResponse
from .revoke_principal_sessions_use_case import (
    RevokePrincipalSessionsUseCase,
    RevokePrincipalSessionsResponse,
)
from .archive_principal_use_case import ArchivePrincipalUseCase, ArchivePrincipalResponse

__all__ = [
    "RotateTokenEpochUseCase",
    "RotateTokenEpochResponse",
    "RevokePrincipalSessionsUseCase",
    "RevokePrincipalSessionsResponse",
    "ArchivePrincipalUseCase",
    "ArchivePrincipalResponse",
]
