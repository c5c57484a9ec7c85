from __future__ import annotations

import logging
import re
from typing import Any, List, Optional

from ..db import get_db
from ..models.profile import (
    PROTECTED_PROFILE_FIELDS,
    ProfileCreateRequest,
    ProfileDocument,
    ProfilePatch,
)
from ..models.user import normalize_email
from ..repositories.counter import CounterRepository
from ..repositories.exceptions import DuplicateKeyRepositoryError, NotFoundRepositoryError
from ..repositories.profile import ProfileRepository
from .common import to_object_id, utcnow
from .exceptions import ForbiddenError, InternalServiceError, InvalidInputError, NotFoundError

LOGGER = logging.getLogger("uvicorn.error")

BIODATA_SEQUENCE = "biodataId"
TEASER_LIMIT = 3
PREMIUM_SHOWCASE_LIMIT = 8
_ID_ASSIGN_ATTEMPTS = 3


def _numeric_age(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


class ProfileRegistry:
    """Publishes biodata, hands out sequential public ids and serves profile reads."""

    def __init__(self, profiles: ProfileRepository, counters: CounterRepository) -> None:
        self._profiles = profiles
        self._counters = counters

    async def _next_biodata_id(self) -> int:
        return await self._counters.next_value(BIODATA_SEQUENCE, seed=self._profiles.max_biodata_id)

    async def create_profile(self, payload: ProfileCreateRequest, *, owner_email: str) -> ProfileDocument:
        owner = normalize_email(owner_email)
        document = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        for field in PROTECTED_PROFILE_FIELDS:
            document.pop(field, None)

        contact_email = document.get("contactEmail")
        if contact_email is None:
            contact_email = owner
        else:
            try:
                contact_email = normalize_email(contact_email)
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
        if contact_email != owner:
            raise ForbiddenError("a biodata can only be published for your own email")

        document.update(
            {
                "contactEmail": contact_email,
                "premiumRequested": False,
                "premiumApproved": False,
                "createdAt": utcnow(),
            }
        )

        # The counter is authoritative; the unique index catches records written around it.
        for _ in range(_ID_ASSIGN_ATTEMPTS):
            biodata_id = await self._next_biodata_id()
            try:
                created = await self._profiles.insert_profile({**document, "biodataId": biodata_id})
            except DuplicateKeyRepositoryError:
                LOGGER.warning("biodataId %s already taken, drawing the next one", biodata_id)
                continue
            LOGGER.info("Biodata created: biodataId=%s id=%s", created.biodata_id, created.id)
            return created

        raise InternalServiceError("could not assign a biodata id")

    async def find_by_email(self, contact_email: str) -> ProfileDocument:
        profile = await self._profiles.get_by_contact_email((contact_email or "").strip().lower())
        if not profile:
            raise NotFoundError("Biodata not found")
        return profile

    async def find_by_biodata_id(self, biodata_id: int) -> ProfileDocument:
        profile = await self._profiles.get_by_biodata_id(biodata_id)
        if not profile:
            raise NotFoundError("Biodata not found")
        return profile

    async def find_by_internal_id(self, profile_id: str) -> ProfileDocument:
        profile = await self._profiles.get_by_id(to_object_id(profile_id, "biodata id"))
        if not profile:
            raise NotFoundError("Biodata not found")
        return profile

    async def list_all(self) -> List[ProfileDocument]:
        docs = await self._profiles.find_slice()
        return [ProfileDocument(**doc) for doc in docs]

    async def list_by_type(self, biodata_type: Optional[str] = None, limit: int = TEASER_LIMIT) -> List[ProfileDocument]:
        query: dict[str, Any] = {}
        text = (biodata_type or "").strip()
        if text:
            pattern = {"$regex": f"^{re.escape(text)}$", "$options": "i"}
            query = {"$or": [{"biodataType": pattern}, {"type": pattern}]}
        docs = await self._profiles.find_slice(query, limit=limit)
        return [ProfileDocument(**doc) for doc in docs]

    async def list_premium_approved(
        self,
        order: str = "asc",
        limit: int = PREMIUM_SHOWCASE_LIMIT,
    ) -> List[ProfileDocument]:
        if limit < 1:
            raise InvalidInputError("limit must be >= 1")
        descending = (order or "").lower() == "desc"
        docs = await self._profiles.find_slice({"premiumApproved": True})

        with_age: list[tuple[float, dict[str, Any]]] = []
        without_age: list[dict[str, Any]] = []
        for doc in docs:
            age = _numeric_age(doc.get("age"))
            if age is None:
                without_age.append(doc)
            else:
                with_age.append((age, doc))
        with_age.sort(key=lambda item: item[0], reverse=descending)

        ordered = [doc for _, doc in with_age] + without_age
        return [ProfileDocument(**doc) for doc in ordered[:limit]]

    async def update_profile(self, profile_id: str, patch: ProfilePatch, *, editor_email: str) -> ProfileDocument:
        """Edit descriptive fields. Contact requests keep their own snapshot."""

        oid = to_object_id(profile_id, "biodata id")
        current = await self._profiles.get_by_id(oid)
        if not current:
            raise NotFoundError("Biodata not found")
        if (current.contact_email or "").lower() != normalize_email(editor_email):
            raise ForbiddenError("only the owner can edit this biodata")

        updates = patch.model_dump(mode="json", by_alias=True, exclude_none=True)
        for field in (*PROTECTED_PROFILE_FIELDS, "contactEmail"):
            updates.pop(field, None)
        if not updates:
            return current

        updates["updatedAt"] = utcnow()
        try:
            return await self._profiles.update_fields(oid, updates)
        except NotFoundRepositoryError:
            raise NotFoundError("Biodata not found") from None


def get_profile_registry() -> ProfileRegistry:
    db = get_db()
    return ProfileRegistry(ProfileRepository(db), CounterRepository(db))


__all__ = ["ProfileRegistry", "get_profile_registry"]
