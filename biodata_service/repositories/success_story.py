"""Repository helpers for published success stories."""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from pymongo import DESCENDING

from ..db.collections import SUCCESS_STORIES_COLLECTION
from ..models.success_story import SuccessStoryDocument
from .base import MongoRepository


class SuccessStoryRepository(MongoRepository):
    collection_name = SUCCESS_STORIES_COLLECTION

    async def list_newest_first(self) -> list[SuccessStoryDocument]:
        docs = await self.find_slice(sort=[("marriageDate", DESCENDING)])
        return [SuccessStoryDocument(**doc) for doc in docs]

    async def insert_story(self, document: dict[str, Any]) -> SuccessStoryDocument:
        doc = {**document, "_id": ObjectId()}
        await self._run(self._collection.insert_one(doc), "insert_one")
        return SuccessStoryDocument(**doc)


__all__ = ["SuccessStoryRepository"]
