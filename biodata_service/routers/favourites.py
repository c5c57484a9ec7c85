from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..integrations.identity import VerifiedIdentity
from ..models.contact_request import DeleteResponse
from ..models.favourite import FavouriteCreate, FavouriteCreatedResponse, FavouriteList
from ..services.exceptions import ForbiddenError
from ..services.favourites import FavouritesIndex, get_favourites_index
from .deps import require_identity

router = APIRouter(prefix="/favourites", tags=["favourites"])


@router.get("", response_model=FavouriteList)
async def list_favourites(
    email: Optional[str] = Query(default=None),
    identity: VerifiedIdentity = Depends(require_identity),
    index: FavouritesIndex = Depends(get_favourites_index),
):
    owner = (email or identity.email).strip().lower()
    if owner != identity.email:
        raise ForbiddenError("favourites can only be listed for your own account")
    return await index.list_for_user(owner)


@router.post("", status_code=201, response_model=FavouriteCreatedResponse)
async def add_favourite(
    payload: FavouriteCreate,
    identity: VerifiedIdentity = Depends(require_identity),
    index: FavouritesIndex = Depends(get_favourites_index),
):
    created = await index.add(payload, owner_email=identity.email)
    return FavouriteCreatedResponse(insertedId=created.id)


@router.delete("/{favourite_id}", response_model=DeleteResponse)
async def remove_favourite(
    favourite_id: str,
    _identity: VerifiedIdentity = Depends(require_identity),
    index: FavouritesIndex = Depends(get_favourites_index),
):
    deleted = await index.remove(favourite_id)
    return DeleteResponse(deletedCount=deleted)


__all__ = ["router"]
