"""Repository helpers for the per-user favourites index."""

from __future__ import annotations

from typing import Any, Union

from bson import ObjectId

from ..db.collections import FAVOURITES_COLLECTION
from ..models.favourite import FavouriteDocument
from .base import MongoRepository


class FavouriteRepository(MongoRepository):
    collection_name = FAVOURITES_COLLECTION

    async def exists(self, user_email: str, biodata_unique_id: Union[int, str]) -> bool:
        doc = await self._run(
            self._collection.find_one(
                {"userEmail": user_email, "biodataUniqueId": biodata_unique_id},
                projection={"_id": 1},
            ),
            "find_one",
        )
        return doc is not None

    async def insert_favourite(self, document: dict[str, Any]) -> FavouriteDocument:
        doc = {**document, "_id": ObjectId()}
        await self._run(self._collection.insert_one(doc), "insert_one")
        return FavouriteDocument(**doc)

    async def list_for_user(self, user_email: str) -> list[FavouriteDocument]:
        docs = await self.find_slice({"userEmail": user_email})
        return [FavouriteDocument(**doc) for doc in docs]

    async def delete(self, favourite_id: ObjectId) -> int:
        result = await self._run(self._collection.delete_one({"_id": favourite_id}), "delete_one")
        return result.deleted_count


__all__ = ["FavouriteRepository"]
