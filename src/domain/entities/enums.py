"""
Mobile Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class PrincipalType(str, Enum):
    """Kind of principal a mobile session belongs to"""

    applicant = "applicant"
    referrer = "referrer"


class TokenUse(str, Enum):
    """Purpose a signed token was minted for"""

    access = "access"
    refresh = "refresh"
    portal = "portal"
