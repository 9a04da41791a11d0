import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


def positive_int(key: str, fallback: int) -> int:
    """Read a positive integer setting, falling back on missing or non-positive values."""
    try:
        value = int(str(data.get(key, "")).strip())
    except ValueError:
        return fallback
    return value if value > 0 else fallback


_THIRTY_DAYS = 30 * 24 * 60 * 60

_APPLICANT_REFRESH_TTL = positive_int("APPLICANT_MOBILE_REFRESH_TOKEN_TTL_SECONDS", _THIRTY_DAYS)
_REFERRER_REFRESH_TTL = positive_int("REFERRER_MOBILE_REFRESH_TOKEN_TTL_SECONDS", _THIRTY_DAYS)
_RATE_LIMIT_MAX = positive_int("RATE_LIMIT_MAX", 10)
_RATE_LIMIT_WINDOW_SECONDS = positive_int("RATE_LIMIT_WINDOW_SECONDS", 60)


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Token signing
    ACCESS_TOKEN_SECRET = data.get("ACCESS_TOKEN_SECRET", "dev-secret-key-change-in-production")
    REFERRER_PORTAL_SECRET = data.get("REFERRER_PORTAL_SECRET", "dev-portal-secret-change-in-production")
    TOKEN_ALGORITHM = data.get("TOKEN_ALGORITHM", "HS256")
    REFERRER_PORTAL_TOKEN_TTL_SECONDS = positive_int("REFERRER_PORTAL_TOKEN_TTL_SECONDS", 7 * 24 * 60 * 60)

    # Applicant mobile sessions
    APPLICANT_MOBILE_ACCESS_TOKEN_TTL_SECONDS = positive_int("APPLICANT_MOBILE_ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
    APPLICANT_MOBILE_REFRESH_TOKEN_TTL_SECONDS = _APPLICANT_REFRESH_TTL
    APPLICANT_MOBILE_SESSION_TTL_SECONDS = positive_int("APPLICANT_MOBILE_SESSION_TTL_SECONDS", _THIRTY_DAYS)
    APPLICANT_MOBILE_STATELESS_REFRESH_TOKEN_TTL_SECONDS = positive_int(
        "APPLICANT_MOBILE_STATELESS_REFRESH_TOKEN_TTL_SECONDS", _APPLICANT_REFRESH_TTL
    )

    # Referrer mobile sessions
    REFERRER_MOBILE_ACCESS_TOKEN_TTL_SECONDS = positive_int("REFERRER_MOBILE_ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
    REFERRER_MOBILE_REFRESH_TOKEN_TTL_SECONDS = _REFERRER_REFRESH_TTL
    REFERRER_MOBILE_SESSION_TTL_SECONDS = positive_int("REFERRER_MOBILE_SESSION_TTL_SECONDS", _THIRTY_DAYS)
    REFERRER_MOBILE_STATELESS_REFRESH_TOKEN_TTL_SECONDS = positive_int(
        "REFERRER_MOBILE_STATELESS_REFRESH_TOKEN_TTL_SECONDS", _REFERRER_REFRESH_TTL
    )

    # Session store
    SESSION_STORE_TIMEOUT_SECONDS = positive_int("SESSION_STORE_TIMEOUT_SECONDS", 5)

    # Rate limiting
    RATE_LIMIT_ENABLED = bool(data.get("RATE_LIMIT_ENABLED", True))
    RATE_LIMIT_STORAGE_URI = data.get("RATE_LIMIT_STORAGE_URI", "async+memory://")
    RATE_LIMIT_APPLICANT_MAX = positive_int("RATE_LIMIT_APPLICANT_MAX", _RATE_LIMIT_MAX)
    RATE_LIMIT_APPLICANT_WINDOW_SECONDS = positive_int(
        "RATE_LIMIT_APPLICANT_WINDOW_SECONDS", _RATE_LIMIT_WINDOW_SECONDS
    )
    RATE_LIMIT_REFERRER_MAX = positive_int("RATE_LIMIT_REFERRER_MAX", _RATE_LIMIT_MAX)
    RATE_LIMIT_REFERRER_WINDOW_SECONDS = positive_int(
        "RATE_LIMIT_REFERRER_WINDOW_SECONDS", _RATE_LIMIT_WINDOW_SECONDS
    )
