from __future__ import annotations

import logging

from ..db import get_db
from ..models.favourite import FavouriteCreate, FavouriteDocument, FavouriteList
from ..models.user import normalize_email
from ..repositories.exceptions import DuplicateKeyRepositoryError
from ..repositories.favourite import FavouriteRepository
from .common import to_object_id, utcnow
from .exceptions import ConflictError, ForbiddenError, InvalidInputError

LOGGER = logging.getLogger("uvicorn.error")


class FavouritesIndex:
    """Per-user bookmarks of biodata, at most one per (user, biodata) pair."""

    def __init__(self, favourites: FavouriteRepository) -> None:
        self._favourites = favourites

    async def add(self, payload: FavouriteCreate, *, owner_email: str) -> FavouriteDocument:
        owner = normalize_email(owner_email)
        if payload.user_email:
            try:
                user_email = normalize_email(payload.user_email)
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
            if user_email != owner:
                raise ForbiddenError("favourites can only be added to your own list")

        biodata_unique_id = payload.biodata_unique_id
        if isinstance(biodata_unique_id, str):
            biodata_unique_id = biodata_unique_id.strip()
            if not biodata_unique_id:
                raise InvalidInputError("biodataUniqueId is required")

        if await self._favourites.exists(owner, biodata_unique_id):
            raise ConflictError("Already added to favourites")

        document = payload.model_dump(by_alias=True, exclude_none=True)
        document.update({"userEmail": owner, "biodataUniqueId": biodata_unique_id, "createdAt": utcnow()})
        try:
            created = await self._favourites.insert_favourite(document)
        except DuplicateKeyRepositoryError:
            # Concurrent add of the same pair; the unique index decided.
            raise ConflictError("Already added to favourites") from None
        LOGGER.info("Favourite added: %s -> %s", owner, biodata_unique_id)
        return created

    async def list_for_user(self, user_email: str) -> FavouriteList:
        items = await self._favourites.list_for_user((user_email or "").strip().lower())
        return FavouriteList(data=items, total=len(items))

    async def remove(self, favourite_id: str) -> int:
        """Delete by id; returns how many records went away (0 or 1)."""

        oid = to_object_id(favourite_id, "favourite id")
        deleted = await self._favourites.delete(oid)
        LOGGER.info("Favourite %s deleted count: %s", oid, deleted)
        return deleted


def get_favourites_index() -> FavouritesIndex:
    return FavouritesIndex(FavouriteRepository(get_db()))


__all__ = ["FavouritesIndex", "get_favourites_index"]
