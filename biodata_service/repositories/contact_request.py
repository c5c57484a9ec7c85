"""Repository helpers for paid contact requests."""

from __future__ import annotations

from typing import Any

from bson import ObjectId

from ..db.collections import CONTACT_REQUESTS_COLLECTION
from ..models.contact_request import ContactRequestDocument, ContactRequestStatus
from .base import MongoRepository


class ContactRequestRepository(MongoRepository):
    collection_name = CONTACT_REQUESTS_COLLECTION

    async def insert_request(self, document: dict[str, Any]) -> ContactRequestDocument:
        doc = {**document, "_id": ObjectId()}
        await self._run(self._collection.insert_one(doc), "insert_one")
        return ContactRequestDocument(**doc)

    async def transition(
        self,
        request_id: ObjectId,
        *,
        source: ContactRequestStatus,
        target: ContactRequestStatus,
    ) -> bool:
        """Move a request from ``source`` to ``target``; False when nothing matched."""

        result = await self._run(
            self._collection.update_one(
                {"_id": request_id, "status": source.value},
                {"$set": {"status": target.value}},
            ),
            "update_one",
        )
        return bool(result.modified_count)

    async def delete(self, request_id: ObjectId) -> int:
        result = await self._run(self._collection.delete_one({"_id": request_id}), "delete_one")
        return result.deleted_count

    async def sum_amount_paid(self, status: ContactRequestStatus) -> float:
        docs = await self.find_slice({"status": status.value}, projection={"amountPaid": 1})
        total = 0
        for doc in docs:
            amount = doc.get("amountPaid")
            if isinstance(amount, (int, float)) and not isinstance(amount, bool):
                total += amount
        return total


__all__ = ["ContactRequestRepository"]
