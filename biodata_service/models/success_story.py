from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .identifiers import PyObjectId


class SuccessStoryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    couple_image: Optional[str] = Field(default=None, alias="coupleImage")
    marriage_date: Optional[datetime] = Field(default=None, alias="marriageDate")
    rating: Optional[Union[int, float]] = None
    success_story: Optional[str] = Field(default=None, alias="successStory")


class SuccessStoryDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    couple_image: Optional[str] = Field(default=None, alias="coupleImage")
    marriage_date: Optional[datetime] = Field(default=None, alias="marriageDate")
    rating: Optional[Union[int, float]] = None
    success_story: Optional[str] = Field(default=None, alias="successStory")


__all__ = ["SuccessStoryCreate", "SuccessStoryDocument"]
