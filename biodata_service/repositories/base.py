"""Shared plumbing for collection repositories."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Mapping, Optional, Sequence, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..config import get_settings
from .exceptions import DuplicateKeyRepositoryError, StoreUnavailableRepositoryError

LOGGER = logging.getLogger("uvicorn.error")

T = TypeVar("T")

SortSpec = Sequence[tuple[str, int]]


class MongoRepository:
    """Base class binding a repository to one collection.

    Every store call goes through :meth:`_run`, which bounds it with the
    configured per-call timeout and converts driver failures into
    repository errors so the service layer never sees pymongo types.
    """

    collection_name: str = ""

    def __init__(self, database: AsyncIOMotorDatabase, *, timeout_ms: Optional[int] = None) -> None:
        self._database = database
        self._collection: AsyncIOMotorCollection = database[self.collection_name]
        if timeout_ms is None:
            timeout_ms = get_settings().store_call_timeout_ms
        self._timeout = max(1, int(timeout_ms)) / 1000.0

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._collection

    async def _run(self, awaitable: Awaitable[T], operation: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except DuplicateKeyError as exc:
            raise DuplicateKeyRepositoryError(f"{self.collection_name}.{operation}: duplicate key") from exc
        except asyncio.TimeoutError as exc:
            LOGGER.error("Store call %s.%s timed out after %.3fs", self.collection_name, operation, self._timeout)
            raise StoreUnavailableRepositoryError(f"{self.collection_name}.{operation} timed out") from exc
        except PyMongoError as exc:
            LOGGER.error("Store call %s.%s failed: %s", self.collection_name, operation, exc)
            raise StoreUnavailableRepositoryError(f"{self.collection_name}.{operation} failed") from exc

    async def count(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return await self._run(self._collection.count_documents(dict(query or {})), "count")

    async def find_slice(
        self,
        query: Optional[Mapping[str, Any]] = None,
        *,
        skip: int = 0,
        limit: int = 0,
        sort: Optional[SortSpec] = None,
        projection: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        options: dict[str, Any] = {"skip": skip, "limit": limit}
        if sort:
            options["sort"] = list(sort)
        if projection:
            options["projection"] = dict(projection)
        cursor = self._collection.find(dict(query or {}), **options)
        return await self._run(cursor.to_list(length=None), "find")


__all__ = ["MongoRepository", "SortSpec"]
