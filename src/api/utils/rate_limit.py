"""
Rate Limit Dependency

Counts exchange/refresh requests per client IP before any credential check.
The decision headers are stashed on request.state so error handlers can echo
them on failure responses too.
"""

from fastapi import Depends, Request, Response, status

from config import ApplicationConfig
from src.api.error import ClientError
from src.app.services.rate_limiter import IRateLimiter, RateLimitDecision
from src.depends import get_rate_limiter
from src.domain.entities import PrincipalType
from src.domain.errors import RateLimited


def get_client_ip(request: Request) -> str:
    """Real client IP behind a reverse proxy"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit(key_prefix: str, principal_type: PrincipalType):
    """
    Build a dependency enforcing the fixed window for one endpoint.

    Limits are read from ApplicationConfig on every request:
    RATE_LIMIT_<APPLICANT|REFERRER>_MAX and ..._WINDOW_SECONDS.
    """
    config_prefix = f"RATE_LIMIT_{PrincipalType(principal_type).value.upper()}"

    async def enforce_rate_limit(
        request: Request,
        response: Response,
        limiter: IRateLimiter = Depends(get_rate_limiter),
    ) -> RateLimitDecision:
        limit = getattr(ApplicationConfig, f"{config_prefix}_MAX")
        window_seconds = getattr(ApplicationConfig, f"{config_prefix}_WINDOW_SECONDS")

        decision = await limiter.hit(f"{key_prefix}:{get_client_ip(request)}", limit, window_seconds)
        headers = decision.headers()
        request.state.rate_limit_headers = headers

        if not decision.allowed:
            raise ClientError(
                RateLimited(retry_after=decision.retry_after),
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers=headers,
            )

        response.headers.update(headers)
        return decision

    return enforce_rate_limit
