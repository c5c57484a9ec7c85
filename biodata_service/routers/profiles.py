from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..integrations.identity import VerifiedIdentity
from ..models.profile import (
    PremiumRequestResponse,
    ProfileCreateRequest,
    ProfileCreatedResponse,
    ProfileDocument,
    ProfilePatch,
)
from ..services.premium_workflow import PremiumWorkflow, get_premium_workflow
from ..services.profile_registry import (
    PREMIUM_SHOWCASE_LIMIT,
    TEASER_LIMIT,
    ProfileRegistry,
    get_profile_registry,
)
from .deps import require_identity

router = APIRouter(tags=["profiles"])


@router.post("/profile", status_code=201, response_model=ProfileCreatedResponse)
async def create_profile(
    payload: ProfileCreateRequest,
    identity: VerifiedIdentity = Depends(require_identity),
    registry: ProfileRegistry = Depends(get_profile_registry),
):
    created = await registry.create_profile(payload, owner_email=identity.email)
    return ProfileCreatedResponse(
        message="Biodata created successfully",
        insertedId=created.id,
        biodataId=created.biodata_id,
    )


@router.patch("/profile/premium-request/{profile_id}", response_model=PremiumRequestResponse)
async def request_premium(
    profile_id: str,
    identity: VerifiedIdentity = Depends(require_identity),
    workflow: PremiumWorkflow = Depends(get_premium_workflow),
):
    return await workflow.request_premium(profile_id, requester_email=identity.email)


@router.patch("/profile/{profile_id}", response_model=ProfileDocument)
async def update_profile(
    profile_id: str,
    patch: ProfilePatch,
    identity: VerifiedIdentity = Depends(require_identity),
    registry: ProfileRegistry = Depends(get_profile_registry),
):
    return await registry.update_profile(profile_id, patch, editor_email=identity.email)


@router.get("/profile/{email}", response_model=ProfileDocument)
async def profile_by_email(email: str, registry: ProfileRegistry = Depends(get_profile_registry)):
    return await registry.find_by_email(email)


@router.get("/profiles", response_model=List[ProfileDocument])
async def list_profiles(registry: ProfileRegistry = Depends(get_profile_registry)):
    return await registry.list_all()


@router.get("/biodata", response_model=List[ProfileDocument])
async def biodata_teaser(
    type: Optional[str] = Query(default=None),
    registry: ProfileRegistry = Depends(get_profile_registry),
):
    return await registry.list_by_type(type, limit=TEASER_LIMIT)


@router.get("/biodata/{profile_id}", response_model=ProfileDocument)
async def biodata_by_internal_id(profile_id: str, registry: ProfileRegistry = Depends(get_profile_registry)):
    return await registry.find_by_internal_id(profile_id)


@router.get("/biodata-by-id/{biodata_id}", response_model=ProfileDocument)
async def biodata_by_public_id(biodata_id: int, registry: ProfileRegistry = Depends(get_profile_registry)):
    return await registry.find_by_biodata_id(biodata_id)


@router.get("/premium-profiles", response_model=List[ProfileDocument])
async def premium_profiles(
    order: str = Query(default="asc"),
    limit: int = Query(default=PREMIUM_SHOWCASE_LIMIT, ge=1),
    registry: ProfileRegistry = Depends(get_profile_registry),
):
    return await registry.list_premium_approved(order=order, limit=limit)


__all__ = ["router"]
