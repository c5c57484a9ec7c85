from __future__ import annotations

import logging

from ..db import get_db
from ..models.success_story import SuccessStoryCreate, SuccessStoryDocument
from ..repositories.success_story import SuccessStoryRepository
from .exceptions import InvalidInputError

LOGGER = logging.getLogger("uvicorn.error")

REQUIRED_STORY_FIELDS = ("coupleImage", "marriageDate", "rating", "successStory")


class SuccessStoryService:
    def __init__(self, stories: SuccessStoryRepository) -> None:
        self._stories = stories

    async def list_stories(self) -> list[SuccessStoryDocument]:
        return await self._stories.list_newest_first()

    async def publish(self, payload: SuccessStoryCreate) -> SuccessStoryDocument:
        document = payload.model_dump(by_alias=True, exclude_none=True)
        missing = [field for field in REQUIRED_STORY_FIELDS if document.get(field) in (None, "")]
        if missing:
            raise InvalidInputError("All fields are required")
        created = await self._stories.insert_story(document)
        LOGGER.info("Success story published: id=%s", created.id)
        return created


def get_success_story_service() -> SuccessStoryService:
    return SuccessStoryService(SuccessStoryRepository(get_db()))


__all__ = ["SuccessStoryService", "get_success_story_service"]
