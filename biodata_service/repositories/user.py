"""Repository helpers for the ``users`` collection."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from ..db.collections import USERS_COLLECTION
from ..models.user import Role, UserDocument
from .base import MongoRepository


class UserRepository(MongoRepository):
    """Thin abstraction over the users collection."""

    collection_name = USERS_COLLECTION

    async def create_user(
        self,
        *,
        email: str,
        name: Optional[str] = None,
        role: Role = Role.BASIC,
        extra: Optional[dict[str, Any]] = None,
    ) -> UserDocument:
        doc: dict[str, Any] = {**(extra or {})}
        doc.update({"_id": ObjectId(), "email": email.lower(), "name": name, "role": role.value})
        await self._run(self._collection.insert_one(doc), "insert_one")
        return UserDocument(**doc)

    async def get_by_email(self, email: str) -> Optional[UserDocument]:
        doc = await self._run(self._collection.find_one({"email": email.lower()}), "find_one")
        return UserDocument(**doc) if doc else None

    async def get_by_id(self, user_id: ObjectId) -> Optional[UserDocument]:
        doc = await self._run(self._collection.find_one({"_id": user_id}), "find_one")
        return UserDocument(**doc) if doc else None

    async def find_by_emails(self, emails: Iterable[str]) -> dict[str, dict[str, Any]]:
        wanted = sorted({email.lower() for email in emails if email})
        if not wanted:
            return {}
        docs = await self.find_slice({"email": {"$in": wanted}})
        return {doc["email"]: doc for doc in docs}

    async def email_exists(self, email: str) -> bool:
        doc = await self._run(
            self._collection.find_one({"email": email.lower()}, projection={"_id": 1}),
            "find_one",
        )
        return doc is not None

    async def set_role(self, user_id: ObjectId, role: Role) -> Optional[UserDocument]:
        """Unconditionally set ``role``; returns the updated user or None when absent."""

        doc = await self._run(
            self._collection.find_one_and_update(
                {"_id": user_id},
                {"$set": {"role": role.value}},
                return_document=ReturnDocument.AFTER,
            ),
            "find_one_and_update",
        )
        return UserDocument(**doc) if doc else None

    async def promote_unless(
        self,
        user_id: ObjectId,
        role: Role,
    ) -> Optional[UserDocument]:
        """Set ``role`` only if the user does not already hold it.

        Returns the document as it was before the write, or None when no user
        matched (absent, or already holding ``role``).
        """

        doc = await self._run(
            self._collection.find_one_and_update(
                {"_id": user_id, "role": {"$ne": role.value}},
                {"$set": {"role": role.value}},
                return_document=ReturnDocument.BEFORE,
            ),
            "find_one_and_update",
        )
        return UserDocument(**doc) if doc else None

    async def restore_role(self, user_id: ObjectId, *, expected: Role, previous: Role) -> bool:
        """Undo a promotion, provided nothing else changed the role in between."""

        result = await self._run(
            self._collection.update_one(
                {"_id": user_id, "role": expected.value},
                {"$set": {"role": previous.value}},
            ),
            "update_one",
        )
        return bool(result.modified_count)


__all__ = ["UserRepository"]
