from typing import List

from fastapi import APIRouter, Depends

from ..models.success_story import SuccessStoryCreate, SuccessStoryDocument
from ..services.success_stories import SuccessStoryService, get_success_story_service

router = APIRouter(prefix="/api/success-stories", tags=["success-stories"])


@router.get("", response_model=List[SuccessStoryDocument])
async def list_stories(service: SuccessStoryService = Depends(get_success_story_service)):
    return await service.list_stories()


@router.post("", status_code=201, response_model=SuccessStoryDocument)
async def publish_story(
    payload: SuccessStoryCreate,
    service: SuccessStoryService = Depends(get_success_story_service),
):
    return await service.publish(payload)


__all__ = ["router"]
