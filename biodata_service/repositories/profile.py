"""Repository helpers for biodata persistence."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument

from ..db.collections import PROFILES_COLLECTION
from ..models.profile import ProfileDocument
from .base import MongoRepository
from .exceptions import NotFoundRepositoryError


class ProfileRepository(MongoRepository):
    """MongoDB access layer for biodata documents."""

    collection_name = PROFILES_COLLECTION

    async def insert_profile(self, document: dict[str, Any]) -> ProfileDocument:
        doc = {**document, "_id": document.get("_id") or ObjectId()}
        await self._run(self._collection.insert_one(doc), "insert_one")
        return ProfileDocument(**doc)

    async def max_biodata_id(self) -> int:
        docs = await self.find_slice(
            {"biodataId": {"$exists": True}},
            limit=1,
            sort=[("biodataId", DESCENDING)],
        )
        if not docs:
            return 0
        return int(docs[0].get("biodataId") or 0)

    async def get_by_id(self, profile_id: ObjectId) -> Optional[ProfileDocument]:
        doc = await self.get_raw({"_id": profile_id})
        return ProfileDocument(**doc) if doc else None

    async def get_by_biodata_id(self, biodata_id: int) -> Optional[ProfileDocument]:
        doc = await self.get_raw({"biodataId": biodata_id})
        return ProfileDocument(**doc) if doc else None

    async def get_by_contact_email(self, contact_email: str) -> Optional[ProfileDocument]:
        doc = await self.get_raw({"contactEmail": contact_email})
        return ProfileDocument(**doc) if doc else None

    async def get_raw(self, query: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        return await self._run(self._collection.find_one(dict(query)), "find_one")

    async def find_by_contact_emails(self, emails: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Map contactEmail -> first profile for every email that has one."""

        wanted = sorted({email for email in emails if email})
        if not wanted:
            return {}
        docs = await self.find_slice({"contactEmail": {"$in": wanted}})
        found: dict[str, dict[str, Any]] = {}
        for doc in docs:
            found.setdefault(doc.get("contactEmail"), doc)
        return found

    async def find_by_biodata_ids(self, biodata_ids: Iterable[int]) -> dict[int, dict[str, Any]]:
        wanted = sorted({bid for bid in biodata_ids if bid is not None})
        if not wanted:
            return {}
        docs = await self.find_slice({"biodataId": {"$in": wanted}})
        return {doc["biodataId"]: doc for doc in docs}

    async def set_premium_requested(self, profile_id: ObjectId) -> tuple[int, int]:
        """Raise the premium request flag; returns (matched, modified)."""

        result = await self._run(
            self._collection.update_one({"_id": profile_id}, {"$set": {"premiumRequested": True}}),
            "update_one",
        )
        return result.matched_count, result.modified_count

    async def approve_premium(self, profile_id: ObjectId) -> bool:
        """Mark a profile approved, only if it requested premium."""

        result = await self._run(
            self._collection.update_one(
                {"_id": profile_id, "premiumRequested": True},
                {"$set": {"premiumApproved": True}},
            ),
            "update_one",
        )
        return bool(result.matched_count)

    async def revoke_premium(self, profile_id: ObjectId) -> None:
        await self._run(
            self._collection.update_one({"_id": profile_id}, {"$set": {"premiumApproved": False}}),
            "update_one",
        )

    async def update_fields(self, profile_id: ObjectId, updates: dict[str, Any]) -> ProfileDocument:
        doc = await self._run(
            self._collection.find_one_and_update(
                {"_id": profile_id},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            ),
            "find_one_and_update",
        )
        if not doc:
            raise NotFoundRepositoryError(f"profile {profile_id} not found")
        return ProfileDocument(**doc)


__all__ = ["ProfileRepository"]
