from __future__ import annotations

import asyncio

import pytest
from pymongo.errors import AutoReconnect, DuplicateKeyError

from biodata_service.config import get_settings
from biodata_service.repositories.exceptions import (
    DuplicateKeyRepositoryError,
    StoreUnavailableRepositoryError,
)
from biodata_service.repositories.user import UserRepository


class SlowCollection:
    """Collection double whose lookups never come back in time."""

    async def find_one(self, *args, **kwargs):
        await asyncio.sleep(0.5)
        return None


class FailingCollection:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def find_one(self, *args, **kwargs):
        raise self._exc


@pytest.mark.asyncio
async def test_slow_store_call_times_out(db) -> None:
    repo = UserRepository(db, timeout_ms=1)
    repo._collection = SlowCollection()

    with pytest.raises(StoreUnavailableRepositoryError) as info:
        await repo.get_by_email("slow@example.com")
    assert isinstance(info.value.__cause__, asyncio.TimeoutError)


@pytest.mark.asyncio
async def test_driver_failure_becomes_store_unavailable(db) -> None:
    repo = UserRepository(db)
    repo._collection = FailingCollection(AutoReconnect("connection reset"))

    with pytest.raises(StoreUnavailableRepositoryError) as info:
        await repo.get_by_email("member@example.com")
    assert isinstance(info.value.__cause__, AutoReconnect)


@pytest.mark.asyncio
async def test_duplicate_key_is_reported_separately(db) -> None:
    repo = UserRepository(db)
    repo._collection = FailingCollection(DuplicateKeyError("E11000 duplicate key error"))

    with pytest.raises(DuplicateKeyRepositoryError):
        await repo.get_by_email("member@example.com")


@pytest.mark.asyncio
async def test_store_timeout_surfaces_as_generic_500(api_client, monkeypatch) -> None:
    monkeypatch.setenv("STORE_CALL_TIMEOUT_MS", "1")
    get_settings.cache_clear()

    async def _slow_lookup(self, email):
        return await self._run(asyncio.sleep(0.5), "find_one")

    monkeypatch.setattr(UserRepository, "get_by_email", _slow_lookup)

    response = await api_client.get("/users/slow@example.com")
    assert response.status_code == 500
    assert response.json() == {"detail": "internal server error"}
