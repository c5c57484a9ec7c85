"""Atomic sequence counters kept in the ``counters`` collection."""

from __future__ import annotations

from typing import Awaitable, Callable

from pymongo import ReturnDocument

from ..db.collections import COUNTERS_COLLECTION
from .base import MongoRepository
from .exceptions import DuplicateKeyRepositoryError, StoreUnavailableRepositoryError


class CounterRepository(MongoRepository):
    collection_name = COUNTERS_COLLECTION

    async def _ensure_seeded(self, name: str, seed: Callable[[], Awaitable[int]]) -> None:
        exists = await self._run(self._collection.find_one({"_id": name}, projection={"_id": 1}), "find_one")
        if exists:
            return
        start = await seed()
        try:
            await self._run(
                self._collection.update_one(
                    {"_id": name},
                    {"$setOnInsert": {"seq": int(start)}},
                    upsert=True,
                ),
                "update_one",
            )
        except DuplicateKeyRepositoryError:
            # Another writer seeded the counter first.
            pass

    async def next_value(self, name: str, *, seed: Callable[[], Awaitable[int]]) -> int:
        """Atomically increment and return the counter ``name``.

        On first use the counter starts from ``await seed()``, so existing data
        keeps its numbering.
        """

        await self._ensure_seeded(name, seed)
        doc = await self._run(
            self._collection.find_one_and_update(
                {"_id": name},
                {"$inc": {"seq": 1}},
                return_document=ReturnDocument.AFTER,
            ),
            "find_one_and_update",
        )
        if not doc:  # pragma: no cover - seeded above
            raise StoreUnavailableRepositoryError(f"counter {name!r} missing")
        return int(doc["seq"])


__all__ = ["CounterRepository"]
