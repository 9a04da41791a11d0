"""
Unit tests for store-unavailable classification
"""

import asyncio

import pytest
from sqlalchemy import exc as sa_exc

from src.adapter.repositories.session_store_guard import is_store_unavailable, session_store_guard
from src.domain.errors import StoreUnavailable


class UndefinedTable(Exception):
    sqlstate = "42P01"


class UniqueViolation(Exception):
    sqlstate = "23505"


@pytest.mark.parametrize(
    "error",
    [
        sa_exc.OperationalError("SELECT 1", {}, Exception("connection refused")),
        sa_exc.InterfaceError("SELECT 1", {}, Exception("closed")),
        sa_exc.TimeoutError("QueuePool limit reached"),
        sa_exc.ProgrammingError("SELECT 1", {}, UndefinedTable()),
        TimeoutError(),
        ConnectionRefusedError(),
    ],
)
def test_store_unavailable_errors(error):
    assert is_store_unavailable(error)


@pytest.mark.parametrize(
    "error",
    [
        sa_exc.IntegrityError("INSERT", {}, UniqueViolation()),
        sa_exc.ProgrammingError("SELECT 1", {}, Exception("relation does not exist")),
        ValueError("bad value"),
    ],
)
def test_other_errors_are_not_store_unavailable(error):
    assert not is_store_unavailable(error)


@pytest.mark.asyncio
async def test_guard_converts_store_errors():
    with pytest.raises(StoreUnavailable) as exc_info:
        async with session_store_guard(1):
            raise sa_exc.OperationalError("SELECT 1", {}, Exception("no such table"))

    assert exc_info.value.reason == "OperationalError"


@pytest.mark.asyncio
async def test_guard_propagates_other_errors():
    with pytest.raises(ValueError):
        async with session_store_guard(1):
            raise ValueError("bad value")


@pytest.mark.asyncio
async def test_guard_times_out_slow_store():
    with pytest.raises(StoreUnavailable):
        async with session_store_guard(0.01):
            await asyncio.sleep(1)
