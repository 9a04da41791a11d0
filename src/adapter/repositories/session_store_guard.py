"""
Session Store Guard

Decides which storage failures mean "the session store is unavailable" and
bounds every store call with a timeout. The decision is made on exception
types and SQLSTATE codes, never on message text.
"""

import asyncio
from contextlib import asynccontextmanager

from sqlalchemy import exc as sa_exc

from src.domain.errors import StoreUnavailable

# Connectivity, pool exhaustion and timeouts
STORE_UNAVAILABLE_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.DisconnectionError,
    sa_exc.TimeoutError,
    sa_exc.NoSuchTableError,
    TimeoutError,
    ConnectionError,
)

# undefined_table
MISSING_SCHEMA_SQLSTATES = frozenset({"42P01"})


def _sqlstate(exc: BaseException):
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_store_unavailable(exc: BaseException) -> bool:
    """True when exc means the store is unreachable or missing its schema"""
    if isinstance(exc, StoreUnavailable):
        return True
    if isinstance(exc, STORE_UNAVAILABLE_ERRORS):
        return True
    if isinstance(exc, sa_exc.DBAPIError) and _sqlstate(exc) in MISSING_SCHEMA_SQLSTATES:
        return True
    return False


@asynccontextmanager
async def session_store_guard(timeout_seconds: float):
    """
    Run a block of session-store I/O within timeout_seconds.

    Store outages surface as StoreUnavailable; every other exception
    propagates unchanged.
    """
    try:
        async with asyncio.timeout(timeout_seconds):
            yield
    except StoreUnavailable:
        raise
    except Exception as exc:
        if is_store_unavailable(exc):
            raise StoreUnavailable(type(exc).__name__) from exc
        raise
