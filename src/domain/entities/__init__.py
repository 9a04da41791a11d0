"""
Mobile Auth Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import PrincipalType, TokenUse

# Export all entities
from .applicant import Applicant, normalize_token_epoch
from .referrer import Referrer
from .mobile_session import MobileSession, as_utc

__all__ = [
    # Enums
    "PrincipalType",
    "TokenUse",
    # Entities
    "Applicant",
    "Referrer",
    "MobileSession",
    # Helpers
    "normalize_token_epoch",
    "as_utc",
]
